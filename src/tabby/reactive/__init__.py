"""Reactive layer — debounced rebuilds and the watch lifecycle."""

from tabby.reactive.coordinator import CoordinatorState, WatchCoordinator
from tabby.reactive.scheduler import (
    FULL_REBUILD,
    DebouncedChannel,
    RebuildRequest,
    RebuildScheduler,
)

__all__ = [
    "FULL_REBUILD",
    "CoordinatorState",
    "DebouncedChannel",
    "RebuildRequest",
    "RebuildScheduler",
    "WatchCoordinator",
]
