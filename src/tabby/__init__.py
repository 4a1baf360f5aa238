"""Tabby — an incremental static-site builder.

Watches a directory of markdown files, renders each page into an HTML shell
with a theme-built render bundle, and keeps ``sitemap.xml`` and ``feed.xml``
in step with the content.

Quick start::

    import tabby

    tabby.dev("my-site/")       # Watch and rebuild incrementally
    tabby.build("my-site/")     # One full build

Site layout (defaults)::

    my-site/
        markdown/                   content, one page per file
        theme/index.template.html   HTML shell
        dist/render-bundle.html     render bundle from the theme build
        tabby.yaml                  optional configuration

"""

__version__ = "0.1.0"
__all__ = [
    "TabbyConfig",
    "__version__",
    "build",
    "dev",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tabby`` fast while providing a clean top-level API.
    """
    if name == "TabbyConfig":
        from tabby.config import TabbyConfig

        return TabbyConfig

    if name == "dev":
        from tabby.app import dev

        return dev

    if name == "build":
        from tabby.app import build

        return build

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
