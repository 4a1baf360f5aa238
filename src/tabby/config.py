"""Tabby configuration.

TabbyConfig is the central configuration object, frozen after creation and
loaded once at process start.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tabby._errors import ConfigError


@dataclass(frozen=True, slots=True)
class TabbyConfig:
    """Configuration for a Tabby site.

    Attributes:
        root: Path to the site root directory. Always resolved to an absolute
              path on construction.
        site_title: Site title, used as the feed channel title.
        author: Default author for pages without one.
        base_url: Absolute site URL, prefixed to routes in the sitemap and feed.
        description: Site description, fallback for pages without an excerpt.
        output: Output directory for generated files.
        content_dir: Directory containing markdown content.
        template: HTML shell template (body and head insertion points).
        bundle: Render bundle produced by the external theme build. Rendering
            does not start until it exists.
        content_suffixes: File suffixes treated as content.
        sitemap_exclude: URL fragments kept out of ``sitemap.xml``.
        feed_exclude: URL fragments kept out of ``feed.xml``.
        drafts: Publish pages marked ``draft: true``.
        fast_delay: Quiet window (seconds) of the fast rebuild channel.
        slow_delay: Quiet window (seconds) of the full reconciliation channel.
        settle_delay: Pause (seconds) after the bundle appears before the first
            template compile.
        stability_threshold: Seconds a template/bundle file must stay unchanged
            before it is read.
        poll_interval: Seconds between stability polls.

    """

    root: Path = field(default_factory=Path.cwd)
    site_title: str = ""
    author: str = ""
    base_url: str = ""
    description: str = ""
    output: Path = field(default_factory=lambda: Path("dist"))
    content_dir: str = "markdown"
    template: str = "theme/index.template.html"
    bundle: str = "dist/render-bundle.html"
    content_suffixes: tuple[str, ...] = (".md", ".markdown")
    sitemap_exclude: tuple[str, ...] = ("404", "/analytics")
    feed_exclude: tuple[str, ...] = ("404",)
    drafts: bool = True
    fast_delay: float = 0.2
    slow_delay: float = 2.0
    settle_delay: float = 0.5
    stability_threshold: float = 2.0
    poll_interval: float = 0.1

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep every derived path comparable.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        for name in ("fast_delay", "slow_delay", "settle_delay",
                     "stability_threshold", "poll_interval"):
            if getattr(self, name) < 0:
                msg = f"{name} must be >= 0, got {getattr(self, name)!r}"
                raise ConfigError(msg)

    @property
    def content_path(self) -> Path:
        """Absolute path to the content directory."""
        return self.root / self.content_dir

    @property
    def template_path(self) -> Path:
        """Absolute path to the HTML shell template."""
        return self.root / self.template

    @property
    def bundle_path(self) -> Path:
        """Absolute path to the render bundle artifact."""
        return self.root / self.bundle

    @property
    def output_path(self) -> Path:
        """Absolute path to the output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    def site_vars(self) -> dict[str, Any]:
        """Site-wide values exposed to templates as ``site``."""
        return {
            "title": self.site_title,
            "author": self.author,
            "base_url": self.base_url,
            "description": self.description,
        }
