"""Content registry — the ordered set of page records.

Owned by the watch coordinator and mutated only from the event loop, so no
locking is needed. Readers get ``snapshot()``, an immutable tuple, never the
live list.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tabby.content.record import PageRecord


class Registry:
    """Insertion-ordered collection of PageRecords keyed by source path.

    Position matters only for aggregate ordering: a record replaced by
    ``upsert`` keeps its slot, a removed record closes the gap.

    """

    __slots__ = ("_positions", "_records")

    def __init__(self, records: Iterable[PageRecord] = ()) -> None:
        self._records: list[PageRecord] = []
        self._positions: dict[Path, int] = {}
        for record in records:
            self.upsert(record)

    def upsert(self, record: PageRecord) -> int:
        """Insert *record*, or replace the entry with the same source path.

        Last write wins, so a change that overtakes its own add is harmless.

        Returns:
            The registry index the record now occupies.

        """
        key = Path(record.source_path)
        index = self._positions.get(key)
        if index is None:
            index = len(self._records)
            self._records.append(record)
            self._positions[key] = index
        else:
            self._records[index] = record
        return index

    def remove_by_source_path(self, path: Path) -> PageRecord | None:
        """Remove and return the record for *path*, or None if it is unknown.

        An unknown path is not an error: an unlink can arrive for a file whose
        add never finished parsing.
        """
        index = self._positions.pop(Path(path), None)
        if index is None:
            return None
        removed = self._records.pop(index)
        for shifted in self._records[index:]:
            self._positions[Path(shifted.source_path)] -= 1
        return removed

    def find_index_by_source_path(self, path: Path) -> int:
        """Return the index of the record for *path*, or -1."""
        return self._positions.get(Path(path), -1)

    def get(self, path: Path) -> PageRecord | None:
        """Return the record for *path*, or None."""
        index = self._positions.get(Path(path))
        return None if index is None else self._records[index]

    def snapshot(self) -> tuple[PageRecord, ...]:
        """Return an immutable view of the current records."""
        return tuple(self._records)

    def clear(self) -> None:
        self._records.clear()
        self._positions.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PageRecord]:
        return iter(self.snapshot())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path) in self._positions
