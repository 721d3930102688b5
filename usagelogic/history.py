from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, List, Optional

from . import canon


@dataclass(frozen=True)
class HistorySnapshot:
    total_hours: float
    updated_at: datetime


class EditHistory:
    """
    Fixed-capacity ring buffer of pre-update snapshots.

    Slots are written at ``(start + size) % capacity``; once full, ``push``
    overwrites the slot at ``start`` (the oldest) and advances ``start``.
    Length therefore never exceeds ``capacity``.
    """

    __slots__ = ("_capacity", "_slots", "_start", "_size")

    def __init__(self, capacity: int = canon.HISTORY_LIMIT):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = int(capacity)
        self._slots: List[Optional[HistorySnapshot]] = [None] * self._capacity
        self._start = 0
        self._size = 0

    @classmethod
    def from_snapshots(
        cls, snapshots: Iterable[HistorySnapshot], capacity: int = canon.HISTORY_LIMIT
    ) -> "EditHistory":
        out = cls(capacity)
        for snap in snapshots:
            out.push(snap)
        return out

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, snapshot: HistorySnapshot) -> None:
        if self._size < self._capacity:
            self._slots[(self._start + self._size) % self._capacity] = snapshot
            self._size += 1
        else:
            self._slots[self._start] = snapshot
            self._start = (self._start + 1) % self._capacity

    def snapshots(self) -> List[HistorySnapshot]:
        """Oldest to newest."""
        out: List[HistorySnapshot] = []
        for i in range(self._size):
            snap = self._slots[(self._start + i) % self._capacity]
            assert snap is not None
            out.append(snap)
        return out

    def latest(self) -> Optional[HistorySnapshot]:
        if not self._size:
            return None
        return self._slots[(self._start + self._size - 1) % self._capacity]

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[HistorySnapshot]:
        return iter(self.snapshots())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EditHistory):
            return NotImplemented
        return self.snapshots() == other.snapshots()

    def __repr__(self) -> str:
        return f"EditHistory(size={self._size}, capacity={self._capacity})"
