"""Debounced rebuild scheduler — two cancellable timers in front of the dispatcher.

Fast channel (default 200ms): fires after a short quiet period with whatever
the burst asked for, a single page or the whole site.

Slow channel (default 2s): fires a full-site render once edits settle, so
cross-page data (navigation, listings) that a single-page render left stale
is eventually rewritten.

Each channel is classic cancel-and-reschedule: every trigger cancels the
pending ``loop.call_later`` handle and schedules a new one, so only the last
trigger in a burst fires. Requests arriving within one burst are merged.
A request carries a source path, never an index; the dispatch action resolves
it against the registry when the timer fires.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby.banner import error

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from pathlib import Path

    from tabby._types import ChannelName


@dataclass(frozen=True, slots=True)
class RebuildRequest:
    """What a channel should render when it fires.

    Attributes:
        source_path: Page to render alone, or None for the whole site.

    """

    source_path: Path | None = None

    @property
    def is_full(self) -> bool:
        return self.source_path is None

    def merge(self, other: RebuildRequest) -> RebuildRequest:
        """Combine two requests from the same burst.

        The same page twice stays a single-page request; anything else
        widens to a full render.
        """
        if self.is_full or other.is_full or self.source_path != other.source_path:
            return FULL_REBUILD
        return other


FULL_REBUILD = RebuildRequest()


class DebouncedChannel:
    """One cancel-and-reschedule timer.

    Args:
        name: Channel label (``fast`` / ``slow``), used in log output.
        delay: Quiet period in seconds.
        action: Coroutine function run with the merged request on fire.

    """

    def __init__(
        self,
        name: str,
        delay: float,
        action: Callable[[RebuildRequest], Awaitable[object]],
    ) -> None:
        self._name = name
        self._delay = delay
        self._action = action
        self._handle: asyncio.TimerHandle | None = None
        self._pending: RebuildRequest | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self.fire_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> RebuildRequest | None:
        """The merged request waiting for the timer, if any."""
        return self._pending

    @property
    def in_flight(self) -> int:
        """Number of fired actions still running."""
        return len(self._tasks)

    def trigger(self, request: RebuildRequest) -> None:
        """(Re)start the quiet period with *request* merged into the pending one.

        Must be called from the event loop thread.
        """
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._pending = request if self._pending is None else self._pending.merge(request)
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending timer. Actions already running are unaffected."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    async def drain(self) -> None:
        """Wait for every fired action to finish."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self) -> None:
        request, self._pending, self._handle = self._pending, None, None
        if request is None:
            return
        self.fire_count += 1
        task = asyncio.get_running_loop().create_task(
            self._run(request), name=f"tabby-{self._name}-rebuild",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, request: RebuildRequest) -> None:
        try:
            await self._action(request)
        except Exception as exc:
            error(f"{self._name} rebuild failed: {exc}")


class RebuildScheduler:
    """Fast + slow debounced channels feeding one dispatch coroutine.

    Args:
        dispatch: ``dispatch(request, channel)`` coroutine function, called
            when a channel fires.
        fast_delay: Quiet period of the fast channel in seconds.
        slow_delay: Quiet period of the slow (reconcile) channel in seconds.

    """

    def __init__(
        self,
        dispatch: Callable[[RebuildRequest, ChannelName], Awaitable[object]],
        fast_delay: float = 0.2,
        slow_delay: float = 2.0,
    ) -> None:
        self.fast = DebouncedChannel("fast", fast_delay, lambda req: dispatch(req, "fast"))
        self.slow = DebouncedChannel("slow", slow_delay, lambda req: dispatch(req, "slow"))

    @property
    def idle(self) -> bool:
        """True when no timer is pending and nothing is running."""
        return all(
            ch.pending is None and ch.in_flight == 0 for ch in (self.fast, self.slow)
        )

    def schedule(self, request: RebuildRequest, *, reconcile: bool = False) -> None:
        """Trigger the fast channel, and the slow channel with a full render if *reconcile*."""
        self.fast.trigger(request)
        if reconcile:
            self.slow.trigger(FULL_REBUILD)

    def cancel(self) -> None:
        """Cancel both pending timers."""
        self.fast.cancel()
        self.slow.cancel()

    async def drain(self) -> None:
        """Wait for in-flight fires on both channels."""
        await self.fast.drain()
        await self.slow.drain()
