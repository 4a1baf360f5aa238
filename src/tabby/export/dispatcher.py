"""Render dispatcher — renders pages and republishes the aggregates.

Every pass, whether one page or the whole site, ends by regenerating and
rewriting ``sitemap.xml`` and ``feed.xml`` so the aggregates always match the
registry snapshot the pass was given.

Passes are serialised by an ``asyncio.Lock``: the dispatcher is the single
writer of the output tree, and a fast pass that fires while a slow pass is
still writing waits its turn.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tabby._errors import WriteError
from tabby.banner import dim, error, warn
from tabby.content.record import RenderContext
from tabby.export.aggregates import generate_aggregates
from tabby.export.writer import output_path_for

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tabby._types import PassChannel, RenderScope
    from tabby.config import TabbyConfig
    from tabby.content.record import PageRecord
    from tabby.observability.collector import StackCollector
    from tabby.render.renderer import Renderer


class OutputWriter(Protocol):
    """What the dispatcher needs from a writer."""

    @property
    def root(self) -> Path: ...

    def write(self, path: Path, data: bytes) -> int: ...

    def delete(self, path: Path) -> bool: ...


@dataclass(frozen=True, slots=True)
class RenderReport:
    """Outcome of one render pass.

    Attributes:
        scope: ``page`` for a single-page pass, ``site`` for a full pass.
        written: Routes whose HTML was written.
        failed: Routes whose render or write failed.
        aggregates_written: Whether both sitemap and feed were written.
        skipped: True when the pass did not run (no template available).
        duration_ms: Wall time of the pass.

    """

    scope: RenderScope
    written: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    aggregates_written: bool = False
    skipped: bool = False
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.failed and self.aggregates_written


class RenderDispatcher:
    """Renders page records to HTML files and publishes sitemap + feed.

    Args:
        config: Site configuration.
        renderer: Compiles and renders pages.
        writer: Persists artifacts under the output root.
        collector: Optional observability collector.

    """

    def __init__(
        self,
        config: TabbyConfig,
        renderer: Renderer,
        writer: OutputWriter,
        collector: StackCollector | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer
        self._writer = writer
        self._collector = collector
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """Whether a render pass is in progress."""
        return self._lock.locked()

    async def render_all(
        self,
        snapshot: Sequence[PageRecord],
        *,
        channel: PassChannel = "direct",
    ) -> RenderReport:
        """Render every record in *snapshot*, then both aggregates."""
        snapshot = tuple(snapshot)
        return await self._run(snapshot, snapshot, "site", channel)

    async def render_one(
        self,
        snapshot: Sequence[PageRecord],
        index: int,
        *,
        channel: PassChannel = "direct",
    ) -> RenderReport:
        """Render only ``snapshot[index]``, then both aggregates.

        Raises:
            IndexError: If *index* is not a valid position in *snapshot*.

        """
        snapshot = tuple(snapshot)
        if not 0 <= index < len(snapshot):
            msg = f"render_one index {index} out of range for {len(snapshot)} records"
            raise IndexError(msg)
        return await self._run(snapshot, (snapshot[index],), "page", channel)

    def publish_aggregates(self, snapshot: Sequence[PageRecord]) -> bool:
        """Generate and write sitemap.xml and feed.xml. Returns True if both landed."""
        t0 = time.perf_counter()
        aggregates = generate_aggregates(snapshot, self._config)
        ok = True
        for route, document in aggregates.documents():
            target = output_path_for(route, self._writer.root)
            try:
                self._writer.write(target, document.encode("utf-8"))
            except WriteError as exc:
                error(f"Aggregate write failed: {exc}")
                ok = False
                continue
            if self._collector is not None:
                self._collector.record_build(
                    "aggregate", route, str(target),
                    duration_ms=(time.perf_counter() - t0) * 1000,
                )
        return ok

    def remove_output(self, record: PageRecord) -> bool:
        """Delete the artifact previously written for *record*.

        Best-effort: a missing artifact is not an error. Returns True if a
        file was removed.
        """
        try:
            target = output_path_for(record.url, self._writer.root)
        except WriteError as exc:
            error(str(exc))
            return False
        deleted = self._writer.delete(target)
        if deleted and self._collector is not None:
            self._collector.record_build("delete", record.url, str(target))
        return deleted

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(
        self,
        snapshot: tuple[PageRecord, ...],
        targets: tuple[PageRecord, ...],
        scope: RenderScope,
        channel: PassChannel,
    ) -> RenderReport:
        async with self._lock:
            t0 = time.perf_counter()
            if not self._renderer.available:
                warn("Render skipped: no shell template, last good output kept")
                return RenderReport(scope=scope, skipped=True)

            published = (
                snapshot if self._config.drafts
                else tuple(r for r in snapshot if not r.draft)
            )
            written: list[str] = []
            failed: list[str] = []
            for record in targets:
                if not record.url:
                    continue
                if record.draft and not self._config.drafts:
                    continue
                if await self._render_record(record, published):
                    written.append(record.url)
                else:
                    failed.append(record.url)

            aggregates_ok = self.publish_aggregates(snapshot)
            elapsed = (time.perf_counter() - t0) * 1000

        if self._collector is not None:
            self._collector.record_rebuild(
                channel, scope,
                pages_rendered=len(written),
                pages_failed=len(failed),
                duration_ms=elapsed,
            )
        pages = "page" if len(written) == 1 else "pages"
        dim(f"Rendered {len(written)} {pages} ({scope}, {channel}) in {elapsed:.0f}ms")

        return RenderReport(
            scope=scope,
            written=tuple(written),
            failed=tuple(failed),
            aggregates_written=aggregates_ok,
            duration_ms=elapsed,
        )

    async def _render_record(self, record: PageRecord, snapshot: tuple[PageRecord, ...]) -> bool:
        """Render and write one record. Failures are reported, never raised."""
        t0 = time.perf_counter()
        context = RenderContext(file=record, files=snapshot)
        try:
            page = await self._renderer.render(context)
        except Exception as exc:
            error(f"Render error: {record.url}: {exc}")
            return False

        try:
            target = output_path_for(record.url, self._writer.root)
            self._writer.write(target, page.html.encode("utf-8"))
        except WriteError as exc:
            error(f"Write error: {record.url}: {exc}")
            return False

        if self._collector is not None:
            self._collector.record_build(
                "render", record.url, str(target),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        return True
