"""Event types recorded while parsing, rendering and watching.

Each event is an immutable slotted dataclass ending in ``timestamp_ns``
(``time.monotonic_ns``), so render threads and the event loop can hand them
to the log without copying.
"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Content events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContentParsed:
    """A content file was parsed into a page record.

    Attributes:
        path: Absolute path to the content file.
        url: Route of the resulting record.
        index: Registry slot the record landed in.
        parse_ms: Time spent parsing in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    url: str
    index: int
    parse_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ContentRemoved:
    """A content file was deleted and its record dropped.

    Attributes:
        path: Absolute path to the deleted content file.
        url: Route of the removed record ("" if it was never registered).
        artifact_deleted: Whether a previously written output file was removed.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    url: str
    artifact_deleted: bool
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildEvent:
    """A single build action completed.

    Attributes:
        kind: The type of build action.
        source: Source (route, template path or aggregate name).
        target: Output file path (or description).
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["render", "write", "delete", "aggregate", "compile"]
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RebuildFired:
    """A debounce channel fired and a render pass ran.

    Attributes:
        channel: Which channel fired (``fast`` or ``slow``).
        scope: ``page`` for a single-page pass, ``site`` for a full pass.
        pages_rendered: Pages written successfully.
        pages_failed: Pages whose render or write failed.
        duration_ms: Wall time of the pass.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    channel: Literal["fast", "slow", "direct"]
    scope: Literal["page", "site"]
    pages_rendered: int
    pages_failed: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class StateChanged:
    """The watch coordinator moved between lifecycle states.

    Attributes:
        old: Previous state name.
        new: New state name.
        reason: Short human-readable cause.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    old: str
    new: str
    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

StackEvent: TypeAlias = (
    ContentParsed
    | ContentRemoved
    | BuildEvent
    | RebuildFired
    | StateChanged
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
