"""Sitemap generation — produce sitemap.xml from the page registry.

One ``<url>`` per page whose route is not on the exclusion list. Timestamps
come from the records, never the wall clock, so regenerating an unchanged
registry yields identical bytes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, indent, tostring

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tabby.content.record import PageRecord

# XML namespace for sitemaps
_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

_PRIORITY = "1.0"


def is_excluded(url: str, fragments: Iterable[str]) -> bool:
    """Return True if *url* contains any of the denylisted fragments."""
    return any(fragment and fragment in url for fragment in fragments)


def absolute_url(base_url: str, route: str) -> str:
    """Join the site base URL and a route (``https://x.com`` + ``/a``)."""
    return base_url.rstrip("/") + route


def isoformat(moment: datetime) -> str:
    """ISO-8601 with seconds precision; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat(timespec="seconds")


def generate_sitemap(
    records: Iterable[PageRecord],
    base_url: str,
    exclude: Iterable[str] = (),
) -> str:
    """Generate a sitemap.xml string from page records.

    Args:
        records: Page records in registry order.
        base_url: Site base URL (e.g., ``"https://example.com"``).
        exclude: URL fragments whose pages are left out.

    Returns:
        Complete XML string suitable for writing to ``sitemap.xml``.

    """
    exclude = tuple(exclude)

    urlset = Element("urlset")
    urlset.set("xmlns", _SITEMAP_NS)

    for record in records:
        if not record.url or is_excluded(record.url, exclude):
            continue

        url_el = SubElement(urlset, "url")
        SubElement(url_el, "loc").text = absolute_url(base_url, record.url)
        SubElement(url_el, "priority").text = _PRIORITY
        SubElement(url_el, "lastmod").text = isoformat(record.updated_at)

    indent(urlset)
    xml = tostring(urlset, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"
