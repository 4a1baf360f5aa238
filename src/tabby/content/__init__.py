"""Content layer — page records and where they come from.

Holds the page record model, the ordered registry, the markdown parser and
the file watcher that reports content, template and bundle changes.
"""

from tabby.content.parser import ContentParser, route_for, split_frontmatter
from tabby.content.record import PageRecord, RenderContext
from tabby.content.registry import Registry
from tabby.content.watcher import ChangeEvent, FileWatcher, categorize_change, iter_content_files

__all__ = [
    "ChangeEvent",
    "ContentParser",
    "FileWatcher",
    "PageRecord",
    "Registry",
    "RenderContext",
    "categorize_change",
    "iter_content_files",
    "route_for",
    "split_frontmatter",
]
