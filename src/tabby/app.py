"""Tabby application — the two public entry points.

``dev`` runs the watch coordinator until interrupted or until the render
bundle disappears. ``build`` loads every page once and writes a full site.
"""

from __future__ import annotations

import asyncio
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from tabby._errors import ContentError, RenderError
from tabby.config_loader import load_config
from tabby.content.parser import ContentParser
from tabby.content.registry import Registry
from tabby.content.watcher import iter_content_files
from tabby.export.dispatcher import RenderDispatcher, RenderReport
from tabby.export.writer import FileWriter
from tabby.observability import EventLog, StackCollector
from tabby.render.renderer import BundleRenderer


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of a one-shot build.

    Attributes:
        report: The full render pass, or None if it never ran.
        parse_errors: Source files that could not be parsed.
        output_dir: Where the site was written.
        duration_ms: Total wall time.

    """

    report: RenderReport | None
    parse_errors: tuple[str, ...]
    output_dir: Path
    duration_ms: float

    @property
    def ok(self) -> bool:
        return self.report is not None and self.report.ok and not self.parse_errors

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def _load_registry(
    parser: ContentParser,
    paths: list[Path],
    collector: StackCollector,
) -> tuple[Registry, tuple[str, ...]]:
    """Parse *paths* into a fresh registry, collecting the failures."""
    from tabby.banner import error

    registry = Registry()
    failures: list[str] = []
    for path in paths:
        t0 = time.perf_counter()
        try:
            record = parser.parse(path)
        except ContentError as exc:
            error(f"Parse error: {path.name}: {exc}")
            failures.append(str(path))
            continue
        index = registry.upsert(record)
        collector.record_parse(
            str(path), record.url, index=index, parse_ms=(time.perf_counter() - t0) * 1000,
        )
    return registry, tuple(failures)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def dev(root: str | Path = ".", **kwargs: object) -> int:
    """Watch the site and rebuild incrementally until interrupted.

    Args:
        root: Path to the site root directory.
        **kwargs: Override TabbyConfig fields.

    Returns:
        Process exit status: 0 after Ctrl-C, 1 if the render bundle was
        removed while watching.

    """
    from tabby.banner import print_banner
    from tabby.reactive.coordinator import CoordinatorState, WatchCoordinator

    config = load_config(Path(root), **kwargs)
    collector = StackCollector(EventLog())

    print_banner(config, len(iter_content_files(config)), mode="dev")

    async def _main() -> CoordinatorState:
        coordinator = WatchCoordinator(config, collector=collector)
        try:
            return await coordinator.run()
        finally:
            await coordinator.stop()

    try:
        state = asyncio.run(_main())
    except KeyboardInterrupt:
        print("\n  Stopped.", file=sys.stderr)
        return 0
    return 1 if state is CoordinatorState.FAILED else 0


def build(root: str | Path = ".", **kwargs: object) -> BuildResult:
    """Render the whole site once: every page, sitemap.xml and feed.xml.

    Args:
        root: Path to the site root directory.
        **kwargs: Override TabbyConfig fields.

    """
    from tabby.banner import error, print_banner

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()
    collector = StackCollector(EventLog())

    parser = ContentParser(config)
    registry, parse_errors = _load_registry(parser, iter_content_files(config), collector)
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(config, len(registry), mode="build", load_ms=load_ms)

    renderer = BundleRenderer(config, collector)
    dispatcher = RenderDispatcher(config, renderer, FileWriter(config.output_path), collector)

    async def _render() -> RenderReport | None:
        try:
            await renderer.compile()
        except RenderError as exc:
            error(str(exc))
            return None
        return await dispatcher.render_all(registry.snapshot())

    report = asyncio.run(_render())
    result = BuildResult(
        report=report,
        parse_errors=parse_errors,
        output_dir=config.output_path,
        duration_ms=(time.perf_counter() - t0) * 1000,
    )
    _print_build_summary(result)
    return result


def _print_build_summary(result: BuildResult) -> None:
    """Print build completion summary to stderr."""
    lines = ["", "─" * 41]
    if result.report is None:
        lines.append("  Build aborted: no template")
    else:
        written = len(result.report.written)
        lines.append(f"  Wrote {written} page{'s' if written != 1 else ''}")
        if result.report.aggregates_written:
            lines.append("  Wrote sitemap.xml and feed.xml")
    failed = len(result.parse_errors) + (len(result.report.failed) if result.report else 0)
    if failed:
        lines.append(f"  {failed} page{'s' if failed != 1 else ''} failed")
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)
