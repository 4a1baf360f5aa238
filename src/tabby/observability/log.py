"""Event log — bounded store for build and watch events.

Parse and render work runs in worker threads while the coordinator records
from the event loop, so reads copy the buffer under the lock and filter
outside it.
"""

import threading
from collections import Counter, deque
from collections.abc import Iterator
from typing import Any

from tabby.observability.events import RebuildFired, StackEvent


def _subject(event: StackEvent) -> str:
    """The file or route an event is about (empty for lifecycle events)."""
    for attr in ("path", "source", "url"):
        value = getattr(event, attr, None)
        if value:
            return str(value)
    return ""


class EventLog:
    """Ring buffer of recent events; the oldest fall off once ``max_events`` is hit.

    Args:
        max_events: Capacity of the buffer.

    """

    __slots__ = ("_buffer", "_capacity", "_mutex")

    def __init__(self, max_events: int = 10_000) -> None:
        self._capacity = max_events
        self._buffer: deque[StackEvent] = deque(maxlen=max_events)
        self._mutex = threading.Lock()

    def append(self, event: StackEvent) -> None:
        with self._mutex:
            self._buffer.append(event)

    def _copy(self) -> list[StackEvent]:
        with self._mutex:
            return list(self._buffer)

    def __iter__(self) -> Iterator[StackEvent]:
        return iter(self._copy())

    def __len__(self) -> int:
        with self._mutex:
            return len(self._buffer)

    def query(
        self,
        *,
        event_type: type | None = None,
        path: str | None = None,
        since_ns: int = 0,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            path: Keep events whose source path, build source or route
                contains this substring.
            since_ns: Keep events stamped at or after this monotonic time.
            limit: Stop after this many matches.

        """
        matches: list[StackEvent] = []
        for event in reversed(self._copy()):
            if event_type is not None and not isinstance(event, event_type):
                continue
            if event.timestamp_ns < since_ns:
                continue
            if path is not None and path not in _subject(event):
                continue
            matches.append(event)
            if len(matches) == limit:
                break
        return matches

    def recent(self, n: int = 20) -> list[StackEvent]:
        """The last *n* events in the order they were recorded."""
        return self._copy()[-n:]

    def clear(self) -> int:
        """Empty the buffer. Returns how many events were dropped."""
        with self._mutex:
            dropped = len(self._buffer)
            self._buffer.clear()
        return dropped

    def stats(self) -> dict[str, Any]:
        """Totals for a status line: events per type and render pass outcomes."""
        events = self._copy()
        passes = [e for e in events if isinstance(e, RebuildFired)]
        return {
            "total": len(events),
            "max_events": self._capacity,
            "by_type": dict(Counter(type(e).__name__ for e in events)),
            "passes_by_channel": dict(Counter(p.channel for p in passes)),
            "pages_rendered": sum(p.pages_rendered for p in passes),
            "pages_failed": sum(p.pages_failed for p in passes),
        }
