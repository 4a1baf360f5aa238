"""Tests for tabby.export.feed — RSS 2.0 feed generation."""

from __future__ import annotations

from pathlib import Path
from xml.etree.ElementTree import Element, fromstring

from tabby.export.feed import generate_feed

from tests.conftest import make_config, make_record

_ATOM = "{http://www.w3.org/2005/Atom}"


def _channel(xml: str) -> Element:
    rss = fromstring(xml.split("\n", 1)[1])
    assert rss.tag == "rss"
    assert rss.get("version") == "2.0"
    return rss.find("channel")


class TestGenerateFeed:
    """generate_feed — channel metadata and items."""

    def test_channel_metadata(self, tmp_path: Path) -> None:
        channel = _channel(generate_feed([], make_config(tmp_path)))

        assert channel.findtext("title") == "Test Site"
        assert channel.findtext("author") == "Ada"
        assert channel.findtext("link") == "https://example.com"
        assert channel.findtext("description") == "A test site"

    def test_self_link(self, tmp_path: Path) -> None:
        channel = _channel(generate_feed([], make_config(tmp_path)))

        self_link = channel.find(f"{_ATOM}link")
        assert self_link.get("href") == "https://example.com/feed.xml"
        assert self_link.get("rel") == "self"

    def test_item_fields(self, tmp_path: Path) -> None:
        record = make_record("/post", title="A Post", author="Grace", excerpt="Short")
        channel = _channel(generate_feed([record], make_config(tmp_path)))

        item = channel.find("item")
        assert item.findtext("title") == "A Post"
        assert item.findtext("author") == "Grace"
        assert item.findtext("description") == "Short"
        assert item.findtext("link") == "https://example.com/post"
        assert item.findtext("pubDate") == "Mon, 01 Jan 2024 12:00:00 +0000"
        guid = item.find("guid")
        assert guid.text == "https://example.com/post"
        assert guid.get("isPermaLink") == "true"

    def test_site_fallbacks(self, tmp_path: Path) -> None:
        channel = _channel(generate_feed([make_record("/post")], make_config(tmp_path)))

        item = channel.find("item")
        assert item.findtext("author") == "Ada"
        assert item.findtext("description") == "A test site"

    def test_excludes_error_page_only(self, tmp_path: Path) -> None:
        records = [make_record("/"), make_record("/404"), make_record("/analytics")]
        channel = _channel(generate_feed(records, make_config(tmp_path)))

        links = [item.findtext("link") for item in channel.findall("item")]
        assert links == ["https://example.com/", "https://example.com/analytics"]

    def test_explicit_exclude(self, tmp_path: Path) -> None:
        records = [make_record("/a"), make_record("/b")]
        channel = _channel(generate_feed(records, make_config(tmp_path), exclude=("/b",)))

        assert [i.findtext("link") for i in channel.findall("item")] == ["https://example.com/a"]

    def test_title_escaped(self, tmp_path: Path) -> None:
        xml = generate_feed([make_record("/a", title="Fish & <Chips>")], make_config(tmp_path))

        assert "Fish &amp; &lt;Chips&gt;" in xml
        assert _channel(xml).find("item").findtext("title") == "Fish & <Chips>"
