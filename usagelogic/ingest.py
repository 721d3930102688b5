from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import IO, Any, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from . import canon, dates
from .exceptions import IngestError
from .history import EditHistory, HistorySnapshot
from .types import Entry

HOURS_COLUMNS = ("total_hours", "totalHours", "hours")


class HistoryRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_hours: float = Field(
        validation_alias=AliasChoices("total_hours", "totalHours")
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        validation_alias=AliasChoices("updated_at", "updatedAt"),
    )


class EntryRecord(BaseModel):
    """Shape of a stored reading as it arrives from storage or an API."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    date: str = Field(pattern=canon.DATE_PATTERN)
    total_hours: float = Field(
        ge=0, validation_alias=AliasChoices("total_hours", "totalHours")
    )
    history: List[HistoryRecord] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )

    def to_entry(self, history_limit: int = canon.HISTORY_LIMIT) -> Entry:
        snaps = (
            HistorySnapshot(total_hours=h.total_hours, updated_at=h.updated_at)
            for h in self.history
        )
        return Entry(
            id=self.id or uuid.uuid4().hex,
            date=self.date,
            total_hours=self.total_hours,
            history=EditHistory.from_snapshots(snaps, capacity=history_limit),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def sort_entries(entries: Iterable[Entry]) -> List[Entry]:
    """Chronological order via the YYYY-MM-DD key (stable for ties)."""
    return sorted(entries, key=lambda e: dates.sortable_key(e.date))


def from_records(
    records: Iterable[Mapping[str, Any]],
    *,
    history_limit: int = canon.HISTORY_LIMIT,
) -> List[Entry]:
    """
    Validate raw reading records and return them as sorted Entry objects.

    Accepts camelCase keys (``totalHours``, ``_id``) as well as snake_case.
    """
    out: List[Entry] = []
    for i, rec in enumerate(records):
        try:
            parsed = EntryRecord.model_validate(dict(rec))
        except ValidationError as exc:
            raise IngestError(f"Invalid entry record at position {i}: {exc}") from exc
        if dates.parse_date(parsed.date) is None:
            raise IngestError(
                f"Invalid entry record at position {i}: "
                f"'{parsed.date}' is not a calendar date"
            )
        out.append(parsed.to_entry(history_limit))
    return sort_entries(out)


def _hours_column(df: pd.DataFrame) -> str:
    for candidate in HOURS_COLUMNS:
        if candidate in df.columns:
            return candidate
    raise IngestError(
        "No hours column found. Expected one of: " + ", ".join(HOURS_COLUMNS) + "."
    )


def from_dataframe(
    df: pd.DataFrame, *, history_limit: int = canon.HISTORY_LIMIT
) -> List[Entry]:
    """
    Build entries from a frame with a ``date`` column (DD-MM-YYYY) and an
    hours column; an ``id`` column is used when present.
    """
    if "date" not in df.columns:
        raise IngestError("Missing required column: date")
    hcol = _hours_column(df)

    frame = pd.DataFrame(
        {
            "date": df["date"].astype(str).str.strip(),
            "total_hours": pd.to_numeric(df[hcol], errors="coerce"),
        }
    )
    if frame["total_hours"].isna().any():
        bad = frame.loc[frame["total_hours"].isna(), "date"].tolist()
        raise IngestError(f"Non-numeric hours for dates: {', '.join(bad)}")
    frame["total_hours"] = frame["total_hours"].astype(float)
    if "id" in df.columns:
        frame["id"] = df["id"].map(lambda v: None if pd.isna(v) else str(v))

    records = frame.to_dict(orient="records")
    return from_records(records, history_limit=history_limit)


def read_csv(
    source: Union[str, IO[str]], *, history_limit: int = canon.HISTORY_LIMIT
) -> List[Entry]:
    # read everything as text so leading zeros in dates survive
    df = pd.read_csv(source, dtype=str)
    return from_dataframe(df, history_limit=history_limit)


def to_dataframe(entries: Sequence[Entry]) -> pd.DataFrame:
    ordered = sort_entries(entries)
    return pd.DataFrame(
        {
            "id": [e.id for e in ordered],
            "date": [e.date for e in ordered],
            "total_hours": [float(e.total_hours) for e in ordered],
            "history_len": [len(e.history) for e in ordered],
        },
        columns=["id", "date", "total_hours", "history_len"],
    )
