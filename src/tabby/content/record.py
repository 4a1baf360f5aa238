"""Page records — one published page per content file."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tabby._errors import ContentError

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Structured representation of one content file, ready for rendering.

    Records are immutable; a change event produces a new record that takes the
    old one's registry slot.

    Attributes:
        source_path: Absolute path of the origin file (registry key).
        url: Route, always starting with ``/``.
        title: Page title.
        created_at: Publish timestamp (drives the feed ``pubDate``).
        updated_at: Last modification timestamp (drives sitemap ``lastmod``).
        author: Page author, or None to fall back to the site author.
        excerpt: Short summary, or None to fall back to the site description.
        draft: Whether the page is marked as a draft.
        body: Rendered HTML body produced by the parser.
        extra: Remaining front-matter keys, passed through to the renderer.

    """

    source_path: Path
    url: str
    title: str
    created_at: datetime
    updated_at: datetime
    author: str | None = None
    excerpt: str | None = None
    draft: bool = False
    body: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.url.startswith("/"):
            msg = f"Route for {self.source_path} must start with '/': {self.url!r}"
            raise ContentError(msg)


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Per-render input handed to the renderer.

    Attributes:
        file: The page being rendered.
        files: Snapshot of every record in the registry, in insertion order.

    """

    file: PageRecord
    files: tuple[PageRecord, ...]
