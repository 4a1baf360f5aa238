"""Content parser — markdown files to page records.

A content file is optional YAML front matter between ``---`` lines followed by
a markdown body. The body is converted with Python-Markdown; the front matter
supplies routing and feed metadata, and anything unrecognised is passed to the
renderer through ``PageRecord.extra``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import markdown
import yaml

from tabby._errors import ContentError
from tabby.content.record import PageRecord

if TYPE_CHECKING:
    from tabby.config import TabbyConfig
    from tabby.content.registry import Registry


_EXTENSIONS = ("extra", "sane_lists", "toc")

# Front-matter keys consumed by PageRecord fields.
_RESERVED = frozenset({
    "title", "url", "permalink", "author", "excerpt", "description",
    "draft", "date", "created", "updated",
})

_HEADING = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


def split_frontmatter(source: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from a markdown source.

    Front matter is delimited by ``---`` on its own line at the start of the
    file. Without it, the metadata is empty and the full source is the body.

    Raises:
        ContentError: If the front matter is not a valid YAML mapping.

    """
    source = source.lstrip("\ufeff").replace("\r\n", "\n")
    if not source.startswith("---\n"):
        return {}, source
    end = source.find("\n---", 3)
    if end == -1:
        return {}, source

    raw = source[4:end]
    rest = source[end + 4:]
    # Drop whatever trails the closing delimiter on its own line.
    body = rest.split("\n", 1)[1] if "\n" in rest else ""

    try:
        metadata = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter: {exc}"
        raise ContentError(msg) from exc
    if not isinstance(metadata, dict):
        msg = f"Front matter must be a mapping, got {type(metadata).__name__}"
        raise ContentError(msg)
    return metadata, body.lstrip("\n")


def route_for(
    source_path: Path,
    content_root: Path,
    metadata: dict[str, Any] | None = None,
) -> str:
    """Derive the route for a content file.

    Resolution order:
        1. ``url`` or ``permalink`` in front matter (a leading ``/`` is added).
        2. The path relative to the content root without its suffix; trailing
           ``index`` segments are dropped and spaces become ``-``.

    Examples::

        markdown/index.md          -> /
        markdown/about.md          -> /about
        markdown/blog/index.md     -> /blog
        markdown/blog/first post.md -> /blog/first-post

    """
    explicit = (metadata or {}).get("url") or (metadata or {}).get("permalink")
    if explicit:
        route = str(explicit).strip()
        return route if route.startswith("/") else "/" + route

    try:
        rel = source_path.relative_to(content_root)
    except ValueError as exc:
        msg = f"{source_path} is outside the content root {content_root}"
        raise ContentError(msg) from exc

    parts = list(rel.with_suffix("").parts)
    if parts and parts[-1] == "index":
        parts.pop()
    if not parts:
        return "/"
    return "/" + "/".join(part.replace(" ", "-") for part in parts)


def _coerce_datetime(value: object, fallback: datetime, *, field_name: str) -> datetime:
    """Normalise a front-matter date to a timezone-aware datetime."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            moment = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            msg = f"Invalid {field_name} {value!r}: expected an ISO-8601 date"
            raise ContentError(msg) from exc
    else:
        return fallback
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _title_from(metadata: dict[str, Any], body: str, source_path: Path) -> str:
    if metadata.get("title"):
        return str(metadata["title"])
    match = _HEADING.search(body)
    if match:
        return match.group(1)
    return source_path.stem.replace("-", " ").replace("_", " ").title()


class ContentParser:
    """Turns content files into PageRecords.

    Not thread-safe: the underlying ``markdown.Markdown`` instance is reset and
    reused for every file, so calls must be sequential. The watch coordinator
    parses one event at a time.

    Args:
        config: Site configuration (content root for route derivation).

    """

    def __init__(self, config: TabbyConfig) -> None:
        self._content_root = config.content_path
        self._markdown = markdown.Markdown(extensions=list(_EXTENSIONS))

    def parse(self, source_path: Path) -> PageRecord:
        """Read and parse one content file.

        Raises:
            ContentError: If the file cannot be read or its metadata is invalid.

        """
        try:
            source = source_path.read_text(encoding="utf-8")
            stat = source_path.stat()
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Cannot read {source_path}: {exc}"
            raise ContentError(msg) from exc

        metadata, body = split_frontmatter(source)

        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        born = datetime.fromtimestamp(
            getattr(stat, "st_birthtime", stat.st_mtime), tz=timezone.utc,
        )
        created = _coerce_datetime(
            metadata.get("date") or metadata.get("created"), born, field_name="date",
        )
        updated = _coerce_datetime(metadata.get("updated"), modified, field_name="updated")

        html = self._markdown.reset().convert(body)

        author = metadata.get("author")
        excerpt = metadata.get("excerpt") or metadata.get("description")
        return PageRecord(
            source_path=source_path,
            url=route_for(source_path, self._content_root, metadata),
            title=_title_from(metadata, body, source_path),
            created_at=created,
            updated_at=updated,
            author=str(author) if author else None,
            excerpt=str(excerpt) if excerpt else None,
            draft=bool(metadata.get("draft", False)),
            body=html,
            extra={k: v for k, v in metadata.items() if k not in _RESERVED},
        )

    def parse_into(self, source_path: Path, registry: Registry) -> int:
        """Parse *source_path* and upsert the record; return its registry index."""
        return registry.upsert(self.parse(source_path))
