"""Shared test fixtures for tabby."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from tabby._errors import RenderError, WriteError
from tabby.config import TabbyConfig
from tabby.content.record import PageRecord, RenderContext
from tabby.render.renderer import RenderedPage

SHELL = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<!-- meta tags will be auto injected here -->
</head>
<body>
<div id="app"></div>
</body>
</html>
"""

BUNDLE = """{% block head %}<title>{{ file.title }} | {{ site.title }}</title>{% endblock %}
{% block body %}<main><h1>{{ file.title }}</h1>{{ file.body | safe }}<nav>{% for f in files %}<a href="{{ f.url }}">{{ f.title }}</a>{% endfor %}</nav></main>{% endblock %}
"""


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site: two pages, a shell template and a render bundle.

    Returns the site root with ``markdown/``, ``theme/`` and ``dist/``.
    """
    content = tmp_path / "markdown"
    content.mkdir()
    (content / "index.md").write_text(
        "---\ntitle: Home\ndate: 2024-01-01\n---\n\n# Welcome\n\nThis is the home page.\n"
    )
    (content / "about.md").write_text(
        "---\ntitle: About\ndate: 2024-01-02\nauthor: Grace\n---\n\nAbout us.\n"
    )

    theme = tmp_path / "theme"
    theme.mkdir()
    (theme / "index.template.html").write_text(SHELL)

    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "render-bundle.html").write_text(BUNDLE)

    return tmp_path


def make_config(root: Path, **overrides: Any) -> TabbyConfig:
    """TabbyConfig with site metadata filled in and timers short enough for tests."""
    values: dict[str, Any] = {
        "site_title": "Test Site",
        "author": "Ada",
        "base_url": "https://example.com",
        "description": "A test site",
        "fast_delay": 0.05,
        "slow_delay": 0.2,
        "settle_delay": 0.0,
        "stability_threshold": 0.05,
        "poll_interval": 0.01,
    }
    values.update(overrides)
    return TabbyConfig(root=root, **values)


@pytest.fixture
def config(tmp_site: Path) -> TabbyConfig:
    return make_config(tmp_site)


def make_record(
    url: str,
    *,
    title: str | None = None,
    source_path: Path | None = None,
    draft: bool = False,
    author: str | None = None,
    excerpt: str | None = None,
    created_at: datetime | None = None,
    updated_at: datetime | None = None,
) -> PageRecord:
    """Create a PageRecord with fixed timestamps."""
    name = url.strip("/") or "index"
    return PageRecord(
        source_path=source_path or Path(f"/site/markdown/{name}.md"),
        url=url,
        title=title if title is not None else name.title(),
        created_at=created_at or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        updated_at=updated_at or datetime(2024, 2, 1, 8, 30, tzinfo=timezone.utc),
        author=author,
        excerpt=excerpt,
        draft=draft,
        body=f"<p>{name}</p>",
    )


class FakeRenderer:
    """Renderer double: renders ``title|page count`` and can be told to fail."""

    def __init__(self, *, available: bool = True) -> None:
        self._available = available
        self.fail_urls: set[str] = set()
        self.fail_compile = False
        self.compiles = 0
        self.rendered: list[str] = []

    @property
    def available(self) -> bool:
        return self._available

    async def compile(self) -> object:
        if self.fail_compile:
            msg = "template does not compile"
            raise RenderError(msg)
        self.compiles += 1
        self._available = True
        return object()

    def invalidate(self) -> None:
        self._available = False

    async def render(self, context: RenderContext) -> RenderedPage:
        if context.file.url in self.fail_urls:
            msg = f"boom: {context.file.url}"
            raise RenderError(msg)
        self.rendered.append(context.file.url)
        return RenderedPage(html=f"<html>{context.file.title}|{len(context.files)}</html>")


class RecordingWriter:
    """Writer double that keeps files in memory and logs every call."""

    def __init__(self, root: Path, *, fail: set[Path] | None = None) -> None:
        self._root = root
        self.fail = fail or set()
        self.files: dict[Path, bytes] = {}
        self.writes: list[Path] = []
        self.deletes: list[Path] = []

    @property
    def root(self) -> Path:
        return self._root

    def write(self, path: Path, data: bytes) -> int:
        if path in self.fail:
            msg = f"Failed to write {path}: disk full"
            raise WriteError(msg)
        self.files[path] = data
        self.writes.append(path)
        return len(data)

    def delete(self, path: Path) -> bool:
        self.deletes.append(path)
        return self.files.pop(path, None) is not None

    def names(self) -> list[str]:
        """Written paths relative to the root, in write order."""
        return [p.relative_to(self._root).as_posix() for p in self.writes]

    def reset(self) -> None:
        self.writes.clear()
        self.deletes.clear()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def writer(tmp_path: Path) -> RecordingWriter:
    return RecordingWriter(tmp_path / "out")
