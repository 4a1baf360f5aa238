"""File watcher — turns filesystem activity into categorised change events.

Wraps ``watchfiles.awatch`` and classifies each changed path:

- Content file (markdown under the content root) -> registry mutation
- Shell template -> recompile + full render
- Render bundle -> watch lifecycle (start, or stop everything)

``wait_for_stable`` is the await-write-finish window: a file is only read once
its size and mtime have stopped changing for a while.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change, awatch

from tabby._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from tabby.config import TabbyConfig


ChangeKind = Literal["created", "modified", "deleted"]
ChangeCategory = Literal["content", "template", "bundle"]


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What kind of file changed (determines how it is handled).

    """

    path: Path
    kind: ChangeKind
    category: ChangeCategory


def categorize_change(path: Path, config: TabbyConfig) -> ChangeCategory | None:
    """Determine the category of a changed file based on its location.

    Returns None if the file is not something tabby reacts to. Dotfiles and
    files under dot-directories in the content root are ignored, as are
    suffixes outside ``config.content_suffixes``.

    """
    if path == config.bundle_path:
        return "bundle"
    if path == config.template_path:
        return "template"

    try:
        rel = path.relative_to(config.content_path)
    except ValueError:
        return None
    if not rel.parts or any(part.startswith(".") for part in rel.parts):
        return None
    if path.suffix.lower() not in config.content_suffixes:
        return None
    return "content"


def iter_content_files(config: TabbyConfig) -> list[Path]:
    """All content files under the content root, sorted by path."""
    root = config.content_path
    if not root.is_dir():
        return []
    return sorted(
        path for path in root.rglob("*")
        if path.is_file() and categorize_change(path, config) == "content"
    )


def collapse_changes(
    raw_changes: set[tuple[Change, str]],
) -> dict[Path, ChangeKind]:
    """Reduce one batch of raw watchfiles changes to a single kind per path.

    A batch is an unordered set, so an editor's delete-then-recreate can show
    up as both ``deleted`` and ``added``. The file's presence on disk decides:
    present means it was created (if any ``added`` was seen) or modified,
    absent means deleted.

    """
    seen: dict[Path, set[Change]] = {}
    for change_type, path_str in raw_changes:
        seen.setdefault(Path(path_str), set()).add(change_type)

    kinds: dict[Path, ChangeKind] = {}
    for path, changes in seen.items():
        if not path.exists():
            kinds[path] = "deleted"
        elif Change.added in changes:
            kinds[path] = "created"
        else:
            kinds[path] = "modified"
    return kinds


async def wait_for_stable(
    path: Path,
    *,
    threshold: float,
    poll_interval: float = 0.1,
) -> bool:
    """Wait until *path* has stopped changing for *threshold* seconds.

    Returns False if the file disappears while waiting.

    """
    last: tuple[int, int] | None = None
    stable_since = time.monotonic()
    while True:
        try:
            stat = path.stat()
        except FileNotFoundError:
            return False
        current = (stat.st_size, stat.st_mtime_ns)
        now = time.monotonic()
        if current != last:
            last = current
            stable_since = now
        elif now - stable_since >= threshold:
            return True
        await asyncio.sleep(poll_interval)


class FileWatcher:
    """Watches a set of directories and yields categorised ChangeEvents.

    Runs ``watchfiles.awatch`` inside the caller's event loop; ``stop()``
    sets the stop event, which ends the iteration in ``changes()``.

    Args:
        paths: Existing directories to watch.
        config: Site configuration (used to categorise paths).
        recursive: Watch subdirectories too.
        categories: Only yield events in these categories.
        name: Label used in log output.

    """

    def __init__(
        self,
        paths: Sequence[Path],
        config: TabbyConfig,
        *,
        recursive: bool = True,
        categories: frozenset[str] = frozenset({"content", "template", "bundle"}),
        name: str = "watcher",
    ) -> None:
        self._paths = tuple(paths)
        self._config = config
        self._recursive = recursive
        self._categories = categories
        self._name = name
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        """Whether ``changes()`` is currently iterating."""
        return self._running and not self._stop_event.is_set()

    def stop(self) -> None:
        """Signal the watcher to stop; ``changes()`` returns shortly after."""
        self._stop_event.set()

    async def changes(self) -> AsyncIterator[ChangeEvent]:
        """Async iterator that yields ChangeEvent objects as they occur.

        Raises:
            WatchError: If a watched directory does not exist.

        """
        missing = [str(p) for p in self._paths if not p.is_dir()]
        if missing:
            msg = f"Cannot watch missing directories: {', '.join(missing)}"
            raise WatchError(msg)
        self._running = True
        try:
            async for raw_changes in awatch(
                *self._paths,
                stop_event=self._stop_event,
                recursive=self._recursive,
                debounce=300,
                step=50,
            ):
                for path, kind in sorted(collapse_changes(raw_changes).items()):
                    category = categorize_change(path, self._config)
                    if category is None or category not in self._categories:
                        continue
                    yield ChangeEvent(path=path, kind=kind, category=category)
        finally:
            self._running = False
