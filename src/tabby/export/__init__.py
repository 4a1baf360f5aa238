"""Export layer — page output, sitemap and feed."""

from tabby.export.aggregates import FEED_ROUTE, SITEMAP_ROUTE, Aggregates, generate_aggregates
from tabby.export.dispatcher import RenderDispatcher, RenderReport
from tabby.export.feed import generate_feed
from tabby.export.sitemap import generate_sitemap
from tabby.export.writer import FileWriter, output_path_for

__all__ = [
    "FEED_ROUTE",
    "SITEMAP_ROUTE",
    "Aggregates",
    "FileWriter",
    "RenderDispatcher",
    "RenderReport",
    "generate_aggregates",
    "generate_feed",
    "generate_sitemap",
    "output_path_for",
]
