"""Stack collector — one recording surface for every build component.

Components take an optional collector and call its ``record_*`` helpers;
the collector stamps each event and stores it in the ``EventLog``.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from typing import Literal

from tabby.observability.events import (
    BuildEvent,
    ContentParsed,
    ContentRemoved,
    RebuildFired,
    StateChanged,
    now_ns,
)
from tabby.observability.log import EventLog


class StackCollector:
    """Event collector for the build pipeline.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Content events -----

    def record_parse(self, path: str, url: str, *, index: int, parse_ms: float = 0.0) -> None:
        """Record a content parse."""
        self._log.append(
            ContentParsed(
                path=path, url=url, index=index, parse_ms=parse_ms, timestamp_ns=now_ns(),
            )
        )

    def record_removal(self, path: str, url: str, *, artifact_deleted: bool) -> None:
        """Record a content file removal."""
        self._log.append(
            ContentRemoved(
                path=path, url=url, artifact_deleted=artifact_deleted, timestamp_ns=now_ns(),
            )
        )

    # ----- Build events -----

    def record_build(
        self,
        kind: Literal["render", "write", "delete", "aggregate", "compile"],
        source: str,
        target: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a build action."""
        self._log.append(
            BuildEvent(
                kind=kind,
                source=source,
                target=target,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_rebuild(
        self,
        channel: Literal["fast", "slow", "direct"],
        scope: Literal["page", "site"],
        *,
        pages_rendered: int,
        pages_failed: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed render pass."""
        self._log.append(
            RebuildFired(
                channel=channel,
                scope=scope,
                pages_rendered=pages_rendered,
                pages_failed=pages_failed,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Lifecycle events -----

    def record_transition(self, old: str, new: str, reason: str = "") -> None:
        """Record a coordinator state transition."""
        self._log.append(StateChanged(old=old, new=new, reason=reason, timestamp_ns=now_ns()))
