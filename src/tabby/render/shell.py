"""HTML shell — the page frame every rendered body is injected into.

The shell is a plain HTML file with two insertion points:

- ``<div id="app"></div>`` receives the rendered page body.
- ``<!-- meta tags will be auto injected here -->`` receives head metadata.
  Without it, head metadata goes right before ``</head>``.

Compiling splits the source once; injecting is string concatenation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby._errors import RenderError

if TYPE_CHECKING:
    from pathlib import Path

BODY_OUTLET = '<div id="app"></div>'
HEAD_OUTLET = "<!-- meta tags will be auto injected here -->"


@dataclass(frozen=True, slots=True)
class CompiledShell:
    """An HTML shell split at its insertion points.

    Attributes:
        before_head: Markup preceding the head insertion point.
        between: Markup between the head and body insertion points.
        after_body: Markup following the body insertion point.
        has_head: Whether the shell accepts head metadata at all.

    """

    before_head: str
    between: str
    after_body: str
    has_head: bool = True

    def inject(self, body: str, head: str = "") -> str:
        """Return the full document with *body* and *head* in place."""
        head = head if self.has_head else ""
        return self.before_head + head + self.between + body + self.after_body


def compile_shell(source: str, origin: Path | None = None) -> CompiledShell:
    """Split a shell template at its insertion points.

    Raises:
        RenderError: If the body insertion point is missing or repeated, or
            the head insertion point follows it.

    """
    where = f" in {origin}" if origin is not None else ""
    count = source.count(BODY_OUTLET)
    if count != 1:
        msg = f"Shell template needs exactly one {BODY_OUTLET!r}{where}, found {count}"
        raise RenderError(msg)

    before_body, after_body = source.split(BODY_OUTLET)
    if HEAD_OUTLET in after_body:
        msg = f"Head insertion point must precede the body insertion point{where}"
        raise RenderError(msg)

    if HEAD_OUTLET in before_body:
        before_head, between = before_body.split(HEAD_OUTLET, 1)
        return CompiledShell(before_head, between, after_body)

    close = before_body.find("</head>")
    if close != -1:
        return CompiledShell(before_body[:close], before_body[close:], after_body)

    return CompiledShell(before_body, "", after_body, has_head=False)
