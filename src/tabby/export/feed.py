"""RSS 2.0 feed generation — produce feed.xml from the page registry.

The feed applies its own, narrower exclusion list than the sitemap: pages
kept out of search indexing (analytics, for instance) still appear here.
"""

from __future__ import annotations

from datetime import timezone
from email.utils import format_datetime
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, indent, tostring

from tabby.export.sitemap import absolute_url, is_excluded

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from tabby.config import TabbyConfig
    from tabby.content.record import PageRecord

_ATOM_NS = "http://www.w3.org/2005/Atom"


def _rfc822(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment)


def generate_feed(
    records: Iterable[PageRecord],
    config: TabbyConfig,
    exclude: Iterable[str] | None = None,
) -> str:
    """Generate an RSS 2.0 document from page records.

    Channel metadata comes from the site configuration. Each item carries the
    page title, author (falling back to the site author), ``pubDate`` from
    ``created_at``, description (falling back to the site description), and the
    absolute page URL as both ``link`` and permalink ``guid``.

    Args:
        records: Page records in registry order.
        config: Site configuration.
        exclude: URL fragments to leave out (defaults to ``config.feed_exclude``).

    """
    exclude = tuple(config.feed_exclude if exclude is None else exclude)

    rss = Element("rss")
    rss.set("version", "2.0")
    rss.set("xmlns:atom", _ATOM_NS)

    channel = SubElement(rss, "channel")
    SubElement(channel, "title").text = config.site_title
    SubElement(channel, "author").text = config.author
    SubElement(channel, "link").text = config.base_url
    SubElement(channel, "description").text = config.description
    self_link = SubElement(channel, "atom:link")
    self_link.set("href", absolute_url(config.base_url, "/feed.xml"))
    self_link.set("rel", "self")
    self_link.set("type", "application/rss+xml")

    for record in records:
        if not record.url or is_excluded(record.url, exclude):
            continue

        link = absolute_url(config.base_url, record.url)
        item = SubElement(channel, "item")
        SubElement(item, "title").text = record.title
        SubElement(item, "author").text = record.author or config.author
        SubElement(item, "pubDate").text = _rfc822(record.created_at)
        SubElement(item, "description").text = record.excerpt or config.description
        SubElement(item, "link").text = link
        guid = SubElement(item, "guid")
        guid.set("isPermaLink", "true")
        guid.text = link

    indent(rss)
    xml = tostring(rss, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"
