"""Tests for tabby.render — HTML shell and the Jinja2 bundle renderer."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from tabby._errors import RenderError
from tabby.config import TabbyConfig
from tabby.content.record import RenderContext
from tabby.observability import BuildEvent, StackCollector
from tabby.render.renderer import BundleRenderer, compile_bundle
from tabby.render.shell import BODY_OUTLET, HEAD_OUTLET, compile_shell

from tests.conftest import SHELL, make_record


# ---------------------------------------------------------------------------
# compile_shell
# ---------------------------------------------------------------------------


class TestCompileShell:
    """compile_shell — splitting at the insertion points."""

    def test_inject_body_and_head(self) -> None:
        shell = compile_shell(SHELL)
        html = shell.inject("<main>hi</main>", "<title>T</title>")

        assert "<main>hi</main>" in html
        assert "<title>T</title>" in html
        assert BODY_OUTLET not in html
        assert HEAD_OUTLET not in html
        assert html.index("<title>T</title>") < html.index("</head>")

    def test_head_before_closing_tag_without_marker(self) -> None:
        shell = compile_shell(f"<html><head></head><body>{BODY_OUTLET}</body></html>")
        html = shell.inject("B", "<meta name=x>")
        assert html == "<html><head><meta name=x></head><body>B</body></html>"

    def test_no_head_drops_metadata(self) -> None:
        shell = compile_shell(f"<body>{BODY_OUTLET}</body>")
        assert shell.has_head is False
        assert shell.inject("B", "<meta>") == "<body>B</body>"

    def test_missing_body_outlet(self) -> None:
        with pytest.raises(RenderError, match="exactly one"):
            compile_shell("<html><body></body></html>", Path("shell.html"))

    def test_repeated_body_outlet(self) -> None:
        with pytest.raises(RenderError, match="found 2"):
            compile_shell(BODY_OUTLET * 2)

    def test_head_after_body(self) -> None:
        with pytest.raises(RenderError, match="must precede"):
            compile_shell(f"<body>{BODY_OUTLET}{HEAD_OUTLET}</body>")


# ---------------------------------------------------------------------------
# compile_bundle / RendererHandle
# ---------------------------------------------------------------------------


class TestCompileBundle:
    """compile_bundle — Jinja2 bundle plus shell."""

    def test_render_blocks(self, config: TabbyConfig) -> None:
        handle = compile_bundle(config.bundle_path, config.template_path, config.site_vars())
        a, b = make_record("/a", title="Alpha"), make_record("/b", title="Beta")

        page = handle.render(RenderContext(file=a, files=(a, b)))

        assert "<title>Alpha | Test Site</title>" in page.html
        assert "<h1>Alpha</h1><p>a</p>" in page.html
        assert '<a href="/b">Beta</a>' in page.html
        assert page.head == "<title>Alpha | Test Site</title>"

    def test_whole_template_is_body(self, config: TabbyConfig) -> None:
        config.bundle_path.write_text("<p>{{ file.title }} of {{ files | length }}</p>")
        handle = compile_bundle(config.bundle_path, config.template_path, {})
        record = make_record("/a", title="Alpha")

        page = handle.render(RenderContext(file=record, files=(record,)))
        assert "<p>Alpha of 1</p>" in page.html
        assert page.head == ""

    def test_autoescape(self, config: TabbyConfig) -> None:
        handle = compile_bundle(config.bundle_path, config.template_path, {})
        record = make_record("/a", title="<script>")
        page = handle.render(RenderContext(file=record, files=(record,)))
        assert "&lt;script&gt;" in page.html

    def test_missing_bundle(self, config: TabbyConfig) -> None:
        config.bundle_path.unlink()
        with pytest.raises(RenderError, match="not found"):
            compile_bundle(config.bundle_path, config.template_path, {})

    def test_missing_shell(self, config: TabbyConfig) -> None:
        config.template_path.unlink()
        with pytest.raises(RenderError, match="Cannot read shell template"):
            compile_bundle(config.bundle_path, config.template_path, {})

    def test_syntax_error(self, config: TabbyConfig) -> None:
        config.bundle_path.write_text("{% block body %}unclosed")
        with pytest.raises(RenderError, match="failed to compile"):
            compile_bundle(config.bundle_path, config.template_path, {})

    def test_page_error_wrapped(self, config: TabbyConfig) -> None:
        config.bundle_path.write_text("{{ file.extra.missing.deeper }}")
        handle = compile_bundle(config.bundle_path, config.template_path, {})
        record = make_record("/a")
        with pytest.raises(RenderError, match="/a"):
            handle.render(RenderContext(file=record, files=(record,)))


# ---------------------------------------------------------------------------
# BundleRenderer
# ---------------------------------------------------------------------------


class TestBundleRenderer:
    """BundleRenderer — handle lifecycle."""

    @pytest.mark.asyncio
    async def test_unavailable_before_compile(self, config: TabbyConfig) -> None:
        renderer = BundleRenderer(config)
        assert renderer.available is False
        record = make_record("/a")
        with pytest.raises(RenderError, match="No compiled template"):
            await renderer.render(RenderContext(file=record, files=(record,)))

    @pytest.mark.asyncio
    async def test_compile_then_render(self, config: TabbyConfig) -> None:
        collector = StackCollector()
        renderer = BundleRenderer(config, collector)
        await renderer.compile()

        record = make_record("/a", title="Alpha")
        page = await renderer.render(RenderContext(file=record, files=(record,)))

        assert renderer.available is True
        assert "<h1>Alpha</h1>" in page.html
        events = collector.log.query(event_type=BuildEvent)
        assert [e.kind for e in events] == ["compile"]

    @pytest.mark.asyncio
    async def test_failed_recompile_keeps_handle(self, config: TabbyConfig) -> None:
        renderer = BundleRenderer(config)
        first = await renderer.compile()
        config.template_path.write_text("<html>no outlet</html>")

        with pytest.raises(RenderError):
            await renderer.compile()

        assert renderer.handle is first
        record = make_record("/a")
        page = await renderer.render(RenderContext(file=record, files=(record,)))
        assert "<h1>A</h1>" in page.html

    @pytest.mark.asyncio
    async def test_invalidate(self, config: TabbyConfig) -> None:
        renderer = BundleRenderer(config)
        await renderer.compile()
        renderer.invalidate()
        assert renderer.available is False
        assert renderer.handle is None

    @pytest.mark.asyncio
    async def test_render_waits_for_compile(self, config: TabbyConfig) -> None:
        renderer = BundleRenderer(config)
        record = make_record("/a", title="Alpha")

        compile_task = asyncio.create_task(renderer.compile())
        await asyncio.sleep(0)
        assert renderer.available is True
        page = await renderer.render(RenderContext(file=record, files=(record,)))

        assert "<h1>Alpha</h1>" in page.html
        await compile_task
