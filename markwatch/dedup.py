## markwatch/dedup.py

from __future__ import annotations
from typing import Any, Iterable, Sequence
from .schemas import RecordKey


def _cell(v: Any) -> str:
    return "" if v is None else str(v)


def row_key(row: Sequence[Any]) -> RecordKey | None:
    """Key for a stored row, or None for a blank row."""
    cells = [_cell(v) for v in list(row)[:3]]
    cells += [""] * (3 - len(cells))
    if not any(cells):
        return None
    return (cells[0], cells[1], cells[2])


class DedupStore:
    """Every (date, time, payload) ever written to the sink. No eviction."""

    def __init__(self) -> None:
        self._seen: set[RecordKey] = set()

    def seed(self, rows: Iterable[Sequence[Any]]) -> int:
        added = 0
        for row in rows:
            key = row_key(row)
            if key is not None and key not in self._seen:
                self._seen.add(key)
                added += 1
        return added

    def contains(self, key: RecordKey) -> bool:
        return key in self._seen

    def record(self, key: RecordKey) -> None:
        self._seen.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)
