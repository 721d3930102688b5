from __future__ import annotations
from typing import TypedDict, Literal, List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from .history import EditHistory

Status = Literal["WAITING", "SAFE", "WARNING", "DANGER", "INVALID_DATA"]


@dataclass
class Entry:
    """
    A single cumulative usage reading.

    ``total_hours`` is the counter value on ``date`` (DD-MM-YYYY), not the
    amount used that day.
    """

    id: str
    date: str
    total_hours: float
    history: EditHistory = field(default_factory=EditHistory)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Validation
class ValidationErrors(TypedDict, total=False):
    date: str
    hours: str


class ValidationResult(TypedDict):
    valid: bool
    errors: ValidationErrors


# Projection
class EntryWithIncrease(TypedDict):
    id: str
    date: str
    total_hours: float
    daily_increase: Optional[float]  # None for the first reading of the month
    is_invalid: bool


class MonthlyStats(TypedDict):
    entries: List[Entry]
    entries_with_increase: List[EntryWithIncrease]
    first_total: Optional[float]
    latest_total: Optional[float]
    first_date: Optional[str]
    latest_date: Optional[str]
    days_between: int
    avg_per_day: float
    projected_total: float
    remaining_hours: float
    days_in_month: int
    entry_count: int
    has_invalid_data: bool
    status: Status
    progress_percentage: float


# Months / summary
class MonthInfo(TypedDict):
    month: int
    year: int
    label: str


class MonthTransition(TypedDict):
    current_month: str
    previous_month: str
    previous_year: int
    previous_last_hours: float


class SummaryMeta(TypedDict):
    month: int
    year: int
    label: str
    monthly_limit: float
    status_label: str


class TrendPayload(TypedDict):
    previous_avg_per_day: Optional[float]
    avg_change_pct: Optional[float]
    sparkline: List[float]


class SummaryPayload(TypedDict):
    meta: SummaryMeta
    stats: MonthlyStats
    trend: TrendPayload
    transition: Optional[MonthTransition]
