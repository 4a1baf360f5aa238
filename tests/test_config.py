"""Tests for tabby.config."""

from pathlib import Path

import pytest

from tabby._errors import ConfigError
from tabby.config import TabbyConfig


class TestTabbyConfig:
    """TabbyConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        assert config.content_dir == "markdown"
        assert config.template == "theme/index.template.html"
        assert config.bundle == "dist/render-bundle.html"
        assert config.content_suffixes == (".md", ".markdown")
        assert config.drafts is True
        assert config.fast_delay == 0.2
        assert config.slow_delay == 2.0

    def test_exclusion_lists_differ(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        assert config.sitemap_exclude == ("404", "/analytics")
        assert config.feed_exclude == ("404",)

    def test_frozen(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        with pytest.raises(AttributeError):
            config.drafts = False  # type: ignore[misc]

    def test_paths_resolve_from_root(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        assert config.content_path == tmp_path / "markdown"
        assert config.template_path == tmp_path / "theme" / "index.template.html"
        assert config.bundle_path == tmp_path / "dist" / "render-bundle.html"
        assert config.output_path == tmp_path / "dist"

    def test_relative_root_made_absolute(self) -> None:
        config = TabbyConfig(root=Path("some-site"))
        assert config.root.is_absolute()
        assert config.root.name == "some-site"

    def test_absolute_output_preserved(self, tmp_path: Path) -> None:
        output = tmp_path / "elsewhere"
        config = TabbyConfig(root=tmp_path / "site", output=output)
        assert config.output_path == output

    def test_negative_delay_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="fast_delay"):
            TabbyConfig(root=tmp_path, fast_delay=-1.0)

    def test_site_vars(self, tmp_path: Path) -> None:
        config = TabbyConfig(
            root=tmp_path,
            site_title="Blog",
            author="Ada",
            base_url="https://example.com",
            description="Notes",
        )
        assert config.site_vars() == {
            "title": "Blog",
            "author": "Ada",
            "base_url": "https://example.com",
            "description": "Notes",
        }
