"""Watch coordinator — file events in, registry mutations and rebuilds out.

Lifecycle::

    IDLE ──bundle appears──▶ PRIMING ──compile + scan + full render──▶ ACTIVE
     ▲                          │                                    │    ▲
     └──template missing────────┘                     template removed    template back
                                                                     ▼    │
                                                                    DEGRADED

    any non-terminal state ──bundle removed──▶ FAILED
    any state ──stop()──▶ STOPPED

Only the bundle directory is watched while IDLE. The content and template
watcher starts once the first full render has been written.

Every watch event goes through ``handle_event``. Errors inside it are
reported on stderr and never propagate to the watch loop.
"""

from __future__ import annotations

import asyncio
import enum
import time
from typing import TYPE_CHECKING

from tabby._errors import ContentError, RenderError
from tabby.banner import error, notice, warn
from tabby.content.parser import ContentParser
from tabby.content.registry import Registry
from tabby.content.watcher import FileWatcher, iter_content_files, wait_for_stable
from tabby.export.dispatcher import RenderDispatcher
from tabby.export.writer import FileWriter
from tabby.reactive.scheduler import FULL_REBUILD, RebuildRequest, RebuildScheduler
from tabby.render.renderer import BundleRenderer

if TYPE_CHECKING:
    from collections.abc import Coroutine, Iterable
    from pathlib import Path
    from typing import Any

    from tabby._types import ChannelName
    from tabby.config import TabbyConfig
    from tabby.content.watcher import ChangeEvent
    from tabby.export.dispatcher import RenderReport
    from tabby.observability.collector import StackCollector
    from tabby.render.renderer import Renderer


class CoordinatorState(enum.Enum):
    IDLE = "idle"
    PRIMING = "priming"
    ACTIVE = "active"
    DEGRADED = "degraded"
    FAILED = "failed"
    STOPPED = "stopped"


_LIVE = frozenset({CoordinatorState.ACTIVE, CoordinatorState.DEGRADED})
_TERMINAL = frozenset({CoordinatorState.FAILED, CoordinatorState.STOPPED})


def _watch_roots(paths: Iterable[Path]) -> list[Path]:
    """Deduplicate *paths*, dropping any nested inside another."""
    roots: list[Path] = []
    for path in sorted(set(paths)):
        if not any(path.is_relative_to(root) for root in roots):
            roots.append(path)
    return roots


class WatchCoordinator:
    """Owns the registry and drives the incremental rebuild loop.

    Collaborators default to the built-in implementations; pass your own to
    swap the parser, renderer or dispatcher.

    Args:
        config: Site configuration.
        parser: Content parser.
        renderer: Page renderer (shell template + bundle).
        dispatcher: Render dispatcher.
        registry: Page registry. Owned by the coordinator from here on.
        collector: Optional observability collector.

    """

    def __init__(
        self,
        config: TabbyConfig,
        *,
        parser: ContentParser | None = None,
        renderer: Renderer | None = None,
        dispatcher: RenderDispatcher | None = None,
        registry: Registry | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._config = config
        self._collector = collector
        self._parser = parser if parser is not None else ContentParser(config)
        self._renderer: Renderer = (
            renderer if renderer is not None else BundleRenderer(config, collector)
        )
        self._dispatcher = (
            dispatcher
            if dispatcher is not None
            else RenderDispatcher(
                config, self._renderer, FileWriter(config.output_path), collector,
            )
        )
        self._registry = registry if registry is not None else Registry()
        self._scheduler = RebuildScheduler(
            self._dispatch, fast_delay=config.fast_delay, slow_delay=config.slow_delay,
        )
        self._state = CoordinatorState.IDLE
        self._bundle_watcher: FileWatcher | None = None
        self._site_watcher: FileWatcher | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._finished = asyncio.Event()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def scheduler(self) -> RebuildScheduler:
        return self._scheduler

    @property
    def dispatcher(self) -> RenderDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Create the watched directories, watch for the bundle, prime if present."""
        if self._state is not CoordinatorState.IDLE or self._bundle_watcher is not None:
            return
        config = self._config
        for directory in (config.bundle_path.parent, config.content_path, config.template_path.parent):
            directory.mkdir(parents=True, exist_ok=True)

        self._bundle_watcher = FileWatcher(
            [config.bundle_path.parent],
            config,
            recursive=False,
            categories=frozenset({"bundle"}),
            name="bundle",
        )
        self._spawn(self._consume(self._bundle_watcher))

        if config.bundle_path.is_file():
            await self.prime()
        else:
            notice(f"Waiting for render bundle: {config.bundle_path}")

    async def run(self) -> CoordinatorState:
        """Start, then block until the coordinator is stopped or fails."""
        await self.start()
        await self._finished.wait()
        return self._state

    async def stop(self) -> None:
        """Cancel pending rebuilds, stop the watchers and finish."""
        if self._state is CoordinatorState.STOPPED:
            return
        self._shutdown()
        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self._scheduler.drain()
        self._transition(CoordinatorState.STOPPED, "stopped")

    async def prime(self) -> bool:
        """Compile the template, load all content and write the first full render.

        Returns True if the coordinator reached ACTIVE.
        """
        if self._state is not CoordinatorState.IDLE:
            return False
        self._transition(CoordinatorState.PRIMING, "render bundle present")
        t0 = time.perf_counter()

        await asyncio.sleep(self._config.settle_delay)
        if self._state is not CoordinatorState.PRIMING:
            return False

        try:
            await self._renderer.compile()
        except RenderError as exc:
            error(str(exc))
            self._transition(CoordinatorState.IDLE, "template unavailable")
            return False

        count = await self.scan_content()
        await self._dispatcher.render_all(self._registry.snapshot())
        if self._state is not CoordinatorState.PRIMING:
            return False

        self._start_site_watcher()
        self._transition(CoordinatorState.ACTIVE, f"{count} pages loaded")
        notice(f"Watching {count} pages ({(time.perf_counter() - t0) * 1000:.0f}ms to prime)")
        return True

    async def scan_content(self) -> int:
        """Parse every content file into the registry. Returns the registry size."""
        for path in iter_content_files(self._config):
            await self._parse(path)
        return len(self._registry)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def handle_event(self, event: ChangeEvent) -> None:
        """Apply one watch event. Errors are reported, never raised."""
        try:
            if event.category == "bundle":
                await self._on_bundle(event)
            elif event.category == "template":
                await self._on_template(event)
            elif event.category == "content":
                await self._on_content(event)
        except Exception as exc:
            error(f"Watch error ({event.path.name}): {exc}")

    async def _on_bundle(self, event: ChangeEvent) -> None:
        if self._state in _TERMINAL:
            return
        if event.kind == "deleted":
            self._fail()
            return

        if not await wait_for_stable(
            event.path,
            threshold=self._config.stability_threshold,
            poll_interval=self._config.poll_interval,
        ):
            return
        if self._state is CoordinatorState.IDLE:
            await self.prime()
        elif self._state in _LIVE:
            # Theme rebuilt: the bundle content changed under a live watch.
            await self._recompile("render bundle changed")

    async def _on_template(self, event: ChangeEvent) -> None:
        if self._state not in _LIVE:
            return
        if event.kind == "deleted":
            if self._state is CoordinatorState.DEGRADED:
                return
            self._renderer.invalidate()
            self._transition(CoordinatorState.DEGRADED, "template removed")
            warn(
                f"Template removed: {event.path}. Renders are paused until it is restored",
            )
            return

        if not await wait_for_stable(
            event.path,
            threshold=self._config.stability_threshold,
            poll_interval=self._config.poll_interval,
        ):
            return
        await self._recompile("template changed")

    async def _on_content(self, event: ChangeEvent) -> None:
        if self._state not in _LIVE:
            return
        path = event.path

        if event.kind == "deleted":
            record = self._registry.remove_by_source_path(path)
            if record is None:
                return
            deleted = self._dispatcher.remove_output(record)
            if self._collector is not None:
                self._collector.record_removal(str(path), record.url, artifact_deleted=deleted)
            notice(f"Removed {record.url}")
            self._scheduler.schedule(FULL_REBUILD)
            return

        previous = self._registry.get(path)
        index = await self._parse(path)
        if index is None:
            return
        record = self._registry.snapshot()[index]

        # An atomic save (temp file renamed over the page) arrives as "created";
        # only an unknown source path is a new page.
        if previous is None:
            self._scheduler.schedule(FULL_REBUILD, reconcile=True)
        elif previous.url != record.url:
            # Route moved: the old artifact would otherwise linger.
            self._dispatcher.remove_output(previous)
            self._scheduler.schedule(FULL_REBUILD, reconcile=True)
        elif record.draft and not previous.draft and not self._config.drafts:
            # Unpublished: drop the page, the next pass drops it from the aggregates.
            self._dispatcher.remove_output(previous)
            notice(f"Unpublished {record.url} (draft)")
            self._scheduler.schedule(FULL_REBUILD, reconcile=True)
        else:
            self._scheduler.schedule(RebuildRequest(source_path=path), reconcile=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _dispatch(self, request: RebuildRequest, channel: ChannelName) -> RenderReport | None:
        """Scheduler action: resolve *request* against the registry as it is now."""
        if self._state not in _LIVE:
            return None
        snapshot = self._registry.snapshot()
        if request.source_path is not None:
            index = self._registry.find_index_by_source_path(request.source_path)
            if index >= 0:
                return await self._dispatcher.render_one(snapshot, index, channel=channel)
        return await self._dispatcher.render_all(snapshot, channel=channel)

    async def _parse(self, path: Path) -> int | None:
        """Parse *path* off-loop and upsert it. Returns the index, or None on failure."""
        t0 = time.perf_counter()
        try:
            record = await asyncio.to_thread(self._parser.parse, path)
        except ContentError as exc:
            error(f"Parse error: {path.name}: {exc}")
            return None
        index = self._registry.upsert(record)
        if self._collector is not None:
            self._collector.record_parse(
                str(path), record.url, index=index, parse_ms=(time.perf_counter() - t0) * 1000,
            )
        return index

    async def _recompile(self, reason: str) -> None:
        try:
            await self._renderer.compile()
        except RenderError as exc:
            error(f"{exc} (keeping the previous template)")
            return
        if self._state is CoordinatorState.DEGRADED:
            self._transition(CoordinatorState.ACTIVE, "template restored")
        notice(f"Recompiled ({reason})")
        await self._dispatcher.render_all(self._registry.snapshot())

    def _start_site_watcher(self) -> None:
        config = self._config
        self._site_watcher = FileWatcher(
            _watch_roots([config.content_path, config.template_path.parent]),
            config,
            categories=frozenset({"content", "template"}),
            name="site",
        )
        self._spawn(self._consume(self._site_watcher))

    async def _consume(self, watcher: FileWatcher) -> None:
        try:
            async for event in watcher.changes():
                await self.handle_event(event)
        except Exception as exc:
            error(f"{watcher.name} watcher stopped: {exc}")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _shutdown(self) -> None:
        self._scheduler.cancel()
        for watcher in (self._bundle_watcher, self._site_watcher):
            if watcher is not None:
                watcher.stop()

    def _fail(self) -> None:
        self._shutdown()
        self._transition(CoordinatorState.FAILED, "render bundle removed")
        warn(
            f"Render bundle removed: {self._config.bundle_path}. "
            "Rebuild the theme and restart `tabby dev`",
        )

    def _transition(self, new: CoordinatorState, reason: str = "") -> None:
        old, self._state = self._state, new
        if self._collector is not None:
            self._collector.record_transition(old.value, new.value, reason)
        if new in _TERMINAL:
            self._finished.set()
