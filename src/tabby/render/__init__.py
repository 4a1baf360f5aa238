"""Render layer — shell template plus render bundle.

Compiles the HTML shell and the Jinja2 render bundle into a handle that turns
a RenderContext into a finished HTML document.
"""

from tabby.render.renderer import (
    BundleRenderer,
    RenderedPage,
    Renderer,
    RendererHandle,
    compile_bundle,
)
from tabby.render.shell import BODY_OUTLET, HEAD_OUTLET, CompiledShell, compile_shell

__all__ = [
    "BODY_OUTLET",
    "HEAD_OUTLET",
    "BundleRenderer",
    "CompiledShell",
    "RenderedPage",
    "Renderer",
    "RendererHandle",
    "compile_bundle",
    "compile_shell",
]
