"""Bundle renderer — turns a page record into a full HTML document.

The render bundle is a Jinja2 template produced by the external theme build
(``dist/render-bundle.html`` by default). It sees three variables: ``file``
(the page), ``files`` (every page, registry order) and ``site`` (site config).
When the bundle defines ``{% block body %}`` and ``{% block head %}`` they are
rendered separately; otherwise the whole template is the body.

The compiled handle (bundle + shell) is replaced by reference. While a
compile is in flight, ``render()`` waits for it rather than using a handle
that is about to be dropped.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound, select_autoescape

from tabby._errors import RenderError
from tabby.render.shell import compile_shell

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from jinja2 import Template

    from tabby.config import TabbyConfig
    from tabby.content.record import RenderContext
    from tabby.observability.collector import StackCollector
    from tabby.render.shell import CompiledShell


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """Output of one page render.

    Attributes:
        html: Complete HTML document (shell with body and head injected).
        head: The head metadata that was injected.

    """

    html: str
    head: str = ""


class Renderer(Protocol):
    """What the dispatcher and coordinator need from a renderer."""

    @property
    def available(self) -> bool: ...

    async def compile(self) -> Any: ...

    def invalidate(self) -> None: ...

    async def render(self, context: RenderContext) -> RenderedPage: ...


@dataclass(frozen=True, slots=True)
class RendererHandle:
    """A compiled bundle paired with its shell. Immutable once built."""

    shell: CompiledShell
    template: Template
    site: Mapping[str, Any]

    def render(self, context: RenderContext) -> RenderedPage:
        """Render *context* synchronously.

        Raises:
            RenderError: If the template fails for this page.

        """
        variables = {"file": context.file, "files": context.files, "site": self.site}
        template = self.template
        try:
            if "body" in template.blocks:
                body = "".join(template.blocks["body"](template.new_context(variables)))
            else:
                body = template.render(variables)
            head = ""
            if "head" in template.blocks:
                head = "".join(template.blocks["head"](template.new_context(variables)))
        except Exception as exc:
            msg = f"Failed to render {context.file.url!r} ({context.file.source_path}): {exc}"
            raise RenderError(msg) from exc
        return RenderedPage(html=self.shell.inject(body, head), head=head.strip())


def compile_bundle(
    bundle_path: Path,
    shell_path: Path,
    site: Mapping[str, Any],
) -> RendererHandle:
    """Compile the shell template and the render bundle into a handle.

    Raises:
        RenderError: If either file is missing or fails to compile.

    """
    try:
        shell_source = shell_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read shell template {shell_path}: {exc}"
        raise RenderError(msg) from exc
    shell = compile_shell(shell_source, shell_path)

    env = Environment(
        loader=FileSystemLoader(str(bundle_path.parent)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml")),
        keep_trailing_newline=True,
    )
    try:
        template = env.get_template(bundle_path.name)
    except TemplateNotFound as exc:
        msg = f"Render bundle not found: {bundle_path}"
        raise RenderError(msg) from exc
    except TemplateError as exc:
        msg = f"Render bundle {bundle_path} failed to compile: {exc}"
        raise RenderError(msg) from exc

    return RendererHandle(shell=shell, template=template, site=dict(site))


class BundleRenderer:
    """Owns the current RendererHandle and renders pages with it.

    Args:
        config: Site configuration (bundle, shell path, site variables).
        collector: Optional observability collector.

    """

    def __init__(self, config: TabbyConfig, collector: StackCollector | None = None) -> None:
        self._bundle_path = config.bundle_path
        self._shell_path = config.template_path
        self._site = config.site_vars()
        self._collector = collector
        self._handle: RendererHandle | None = None
        self._ready = asyncio.Event()
        self._compiling = 0

    @property
    def handle(self) -> RendererHandle | None:
        return self._handle

    @property
    def available(self) -> bool:
        """True when a handle exists or one is being compiled."""
        return self._handle is not None or self._compiling > 0

    async def compile(self) -> RendererHandle:
        """Compile a fresh handle and swap it in.

        On failure the previous handle (if any) stays in service.

        Raises:
            RenderError: If the shell or bundle cannot be compiled.

        """
        self._compiling += 1
        self._ready.clear()
        t0 = time.perf_counter()
        try:
            handle = await asyncio.to_thread(
                compile_bundle, self._bundle_path, self._shell_path, self._site,
            )
        except RenderError:
            # Wake waiting renders; they fall back to the old handle or fail.
            self._ready.set()
            raise
        finally:
            self._compiling -= 1

        self._handle = handle
        self._ready.set()
        if self._collector is not None:
            self._collector.record_build(
                "compile",
                str(self._shell_path),
                str(self._bundle_path),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return handle

    def invalidate(self) -> None:
        """Drop the current handle (shell template removed)."""
        self._handle = None
        self._ready.clear()

    async def render(self, context: RenderContext) -> RenderedPage:
        """Render one page, waiting for an in-flight compile if needed.

        Raises:
            RenderError: If no template is available or the page fails.

        """
        if not self.available:
            msg = "No compiled template available"
            raise RenderError(msg)
        await self._ready.wait()
        handle = self._handle
        if handle is None:
            msg = "No compiled template available"
            raise RenderError(msg)
        return await asyncio.to_thread(handle.render, context)
