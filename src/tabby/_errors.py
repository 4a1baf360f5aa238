"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.
"""


class TabbyError(Exception):
    """Base error for all tabby operations."""


class ConfigError(TabbyError):
    """Invalid or missing configuration."""


class ContentError(TabbyError):
    """Error turning a content file into a page record."""


class RenderError(TabbyError):
    """Error compiling the render bundle or rendering a page."""


class WriteError(TabbyError):
    """Error persisting an output artifact."""


class WatchError(TabbyError):
    """Error in the file watch lifecycle."""
