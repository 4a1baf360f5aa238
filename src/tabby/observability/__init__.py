"""Build observability — structured events for the rebuild engine.

Every parse, removal, render, write, aggregate publish, debounce fire and
coordinator transition is recorded as a frozen event with a monotonic
nanosecond timestamp.

Quick Start:
    >>> from tabby.observability import StackCollector, EventLog
    >>> collector = StackCollector(EventLog())
    >>> # Pass collector to RenderDispatcher / WatchCoordinator
    >>> collector.log.stats()["total"]
    0

"""

from tabby.observability.collector import StackCollector
from tabby.observability.events import (
    BuildEvent,
    ContentParsed,
    ContentRemoved,
    RebuildFired,
    StackEvent,
    StateChanged,
    now_ns,
)
from tabby.observability.log import EventLog

__all__ = [
    "BuildEvent",
    "ContentParsed",
    "ContentRemoved",
    "EventLog",
    "RebuildFired",
    "StackCollector",
    "StackEvent",
    "StateChanged",
    "now_ns",
]
