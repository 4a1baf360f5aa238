"""Aggregate generation — sitemap and feed from the whole registry.

A pure function of the records and the configuration: no I/O, no wall
clock. The dispatcher calls it after every render pass, single page or full.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby.export.feed import generate_feed
from tabby.export.sitemap import generate_sitemap

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby.config import TabbyConfig
    from tabby.content.record import PageRecord

SITEMAP_ROUTE = "/sitemap.xml"
FEED_ROUTE = "/feed.xml"


@dataclass(frozen=True, slots=True)
class Aggregates:
    """The two site-wide documents derived from the registry.

    Attributes:
        sitemap: Complete ``sitemap.xml`` document.
        feed: Complete RSS 2.0 ``feed.xml`` document.

    """

    sitemap: str
    feed: str

    def documents(self) -> tuple[tuple[str, str], ...]:
        """``(route, document)`` pairs ready for the writer."""
        return ((SITEMAP_ROUTE, self.sitemap), (FEED_ROUTE, self.feed))


def generate_aggregates(records: Iterable[PageRecord], config: TabbyConfig) -> Aggregates:
    """Build the sitemap and feed for *records*.

    Drafts are left out when ``config.drafts`` is False. The sitemap and the
    feed each apply their own exclusion list.

    """
    published = tuple(r for r in records if config.drafts or not r.draft)
    return Aggregates(
        sitemap=generate_sitemap(published, config.base_url, config.sitemap_exclude),
        feed=generate_feed(published, config),
    )
