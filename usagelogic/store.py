from __future__ import annotations
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from . import ingest, projection, summary
from .config import TrackerConfig, default_config
from .exceptions import EntryNotFoundError, EntryValidationError
from .history import EditHistory, HistorySnapshot
from .types import Entry, MonthlyStats, SummaryPayload
from .validate import validate_entry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EntryStore:
    """
    In-memory home for readings.

    Every mutation is gated by ``validate_entry``, checked and applied under
    one reentrant lock. Edits to the same entry are last-write-wins.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        *,
        clock: Optional[Clock] = None,
        entries: Iterable[Entry] = (),
    ):
        self.config = config or default_config()
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._entries: Dict[str, Entry] = {e.id: e for e in entries}

    def __len__(self) -> int:
        return len(self._entries)

    def list(self) -> List[Entry]:
        with self._lock:
            snapshot = list(self._entries.values())
        return ingest.sort_entries(snapshot)

    def get(self, entry_id: str) -> Entry:
        with self._lock:
            entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(f"Entry not found: {entry_id}")
        return entry

    def _check(self, date: str, total_hours: object, editing_id: Optional[str]) -> float:
        result = validate_entry(
            {"date": date, "total_hours": total_hours},
            self.list(),
            editing_id,
            config=self.config,
            today=self._today(),
        )
        if not result["valid"]:
            logger.warning("Rejected entry for %s: %s", date, result["errors"])
            raise EntryValidationError(result["errors"])
        return float(str(total_hours).strip())

    def _today(self):
        return self._clock().astimezone(timezone(self.config.utc_offset)).date()

    def add(self, date: str, total_hours: object) -> Entry:
        # validate and insert under one lock so a date can only be taken once
        with self._lock:
            hours = self._check(date, total_hours, None)
            now = self._clock()
            entry = Entry(
                id=uuid.uuid4().hex,
                date=date,
                total_hours=hours,
                history=EditHistory(self.config.history_limit),
                created_at=now,
                updated_at=now,
            )
            self._entries[entry.id] = entry
        logger.info("Added entry %s for %s (%.2f h)", entry.id, date, hours)
        return entry

    def update(self, entry_id: str, date: str, total_hours: object) -> Entry:
        with self._lock:
            entry = self.get(entry_id)
            hours = self._check(date, total_hours, entry_id)
            now = self._clock()
            # snapshot is taken even when the value is unchanged
            entry.history.push(HistorySnapshot(total_hours=entry.total_hours, updated_at=now))
            entry.date = date
            entry.total_hours = hours
            entry.updated_at = now
        logger.info("Updated entry %s for %s (%.2f h)", entry_id, date, hours)
        return entry

    def delete(self, entry_id: str) -> None:
        with self._lock:
            removed = self._entries.pop(entry_id, None)
        if removed is None:
            raise EntryNotFoundError(f"Entry not found: {entry_id}")
        logger.info("Deleted entry %s (%s)", entry_id, removed.date)

    def clear_all(self) -> int:
        """
        Delete every entry one at a time. Not atomic: entries removed by
        someone else in the meantime are skipped. Returns how many this call
        removed.
        """
        removed = 0
        for entry in self.list():
            try:
                self.delete(entry.id)
            except EntryNotFoundError:
                logger.warning("Entry %s already removed during clear_all", entry.id)
                continue
            removed += 1
        return removed

    def stats(self, month: int, year: int) -> MonthlyStats:
        return projection.compute_monthly_stats(
            self.list(), month, year, config=self.config
        )

    def summary(self, month: int, year: int) -> SummaryPayload:
        return summary.summarise(self.list(), month, year, config=self.config)
