from __future__ import annotations
import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence, cast

import numpy as np
import pandas as pd

from . import dates
from .config import TrackerConfig, default_config
from .types import Entry, EntryWithIncrease, MonthlyStats, Status

logger = logging.getLogger(__name__)


def to_number(val: Any) -> Optional[float]:
    """Float value, or None when ``val`` does not coerce (or is NaN)."""
    try:
        num = float(val)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(num) else num


def safe_number(val: Any) -> float:
    """Numeric value or 0.0 for anything that does not coerce."""
    num = to_number(val)
    return 0.0 if num is None else num


def safe_round(val: float, ndigits: int) -> float:
    """Round half away from zero; NaN/inf become 0.0."""
    if not np.isfinite(val):
        return 0.0
    try:
        quantum = Decimal(1).scaleb(-ndigits)
        return float(Decimal(val).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # too many digits for the decimal context
        return float(round(val, ndigits))


def month_entries(entries: Sequence[Entry], month: int, year: int) -> List[Entry]:
    """Entries inside the month, in the order supplied (callers sort first)."""
    return [e for e in entries if dates.is_in_month(e.date, month, year)]


def compute_daily_increase(
    entries: Sequence[Entry], *, config: Optional[TrackerConfig] = None
) -> List[EntryWithIncrease]:
    """
    Attach the delta from the previous reading to each entry.

    The first entry has no increase (None). A difference involving a value
    that does not coerce to a number is treated as 0.
    """
    if not entries:
        return []
    cfg = config or default_config()

    totals = pd.to_numeric(
        pd.Series([e.total_hours for e in entries], dtype=object), errors="coerce"
    ).astype(float)
    diffs = totals.diff().fillna(0.0).to_numpy()

    out: List[EntryWithIncrease] = []
    for i, entry in enumerate(entries):
        if i == 0:
            increase: Optional[float] = None
            invalid = False
        else:
            raw = float(diffs[i])
            invalid = raw < 0
            increase = safe_round(raw, cfg.hours_precision)
            if invalid:
                logger.debug(
                    "Negative daily increase on %s (%s)", entry.date, increase
                )
        out.append(
            {
                "id": entry.id,
                "date": entry.date,
                "total_hours": safe_number(entry.total_hours),
                "daily_increase": increase,
                "is_invalid": invalid,
            }
        )
    return out


def has_invalid_data(entries_with_increase: Sequence[EntryWithIncrease]) -> bool:
    return any(e["is_invalid"] for e in entries_with_increase)


def classify(projected_total: float, *, config: Optional[TrackerConfig] = None) -> Status:
    cfg = config or default_config()
    if projected_total >= cfg.monthly_limit:
        return "DANGER"
    if projected_total > cfg.warning_threshold:
        return "WARNING"
    return "SAFE"


def _average_rate(first: Entry, latest: Entry) -> tuple[int, float]:
    span = dates.days_between(first.date, latest.date)
    if span <= 0:
        # only reachable with duplicate dates
        return span, 0.0
    rate = (safe_number(latest.total_hours) - safe_number(first.total_hours)) / span
    return span, rate


def compute_monthly_stats(
    entries: Sequence[Entry],
    month: int,
    year: int,
    *,
    config: Optional[TrackerConfig] = None,
) -> MonthlyStats:
    """
    Month-scoped usage statistics and end-of-month projection.

    ``entries`` may span many months but must already be in chronological
    order. The projection is the observed average daily rate multiplied by
    the number of days in the whole month; it is not anchored to the latest
    reading. Any negative day-over-day delta marks the month INVALID_DATA and
    zeroes the projection and remaining hours.
    """
    cfg = config or default_config()
    limit = float(cfg.monthly_limit)
    n_days = dates.days_in_month(month, year)

    selected = month_entries(entries, month, year)
    with_increase = compute_daily_increase(selected, config=cfg)
    invalid = has_invalid_data(with_increase)

    stats: MonthlyStats = cast(
        MonthlyStats,
        {
            "entries": selected,
            "entries_with_increase": with_increase,
            "first_total": None,
            "latest_total": None,
            "first_date": None,
            "latest_date": None,
            "days_between": 0,
            "avg_per_day": 0.0,
            "projected_total": 0.0,
            "remaining_hours": safe_round(limit, cfg.hours_precision),
            "days_in_month": n_days,
            "entry_count": len(selected),
            "has_invalid_data": invalid,
            "status": "WAITING",
            "progress_percentage": 0.0,
        },
    )

    if not selected:
        return stats

    first = selected[0]
    latest = selected[-1]
    first_total = safe_number(first.total_hours)
    latest_total = safe_number(latest.total_hours)
    progress = safe_round(latest_total / limit * 100.0, cfg.percent_precision)

    stats.update(
        {
            "first_total": safe_round(first_total, cfg.hours_precision),
            "latest_total": safe_round(latest_total, cfg.hours_precision),
            "first_date": first.date,
            "latest_date": latest.date,
            "progress_percentage": progress,
        }
    )

    if len(selected) == 1:
        # Provisional: nothing to extrapolate from a single reading
        stats.update(
            {
                "projected_total": safe_round(latest_total, cfg.hours_precision),
                "remaining_hours": safe_round(limit - latest_total, cfg.hours_precision),
                "status": "SAFE",
            }
        )
        return stats

    span, rate = _average_rate(first, latest)
    avg_per_day = safe_round(rate, cfg.rate_precision)
    projected = safe_round(rate * n_days, cfg.hours_precision)
    remaining = safe_round(limit - latest_total, cfg.hours_precision)

    status: Status
    if invalid:
        projected = 0.0
        remaining = 0.0
        status = "INVALID_DATA"
    else:
        status = classify(projected, config=cfg)

    stats.update(
        {
            "days_between": span,
            "avg_per_day": avg_per_day,
            "projected_total": projected,
            "remaining_hours": remaining,
            "status": status,
        }
    )
    return stats


def previous_month_average(
    entries: Sequence[Entry],
    month: int,
    year: int,
    *,
    config: Optional[TrackerConfig] = None,
) -> Optional[float]:
    """Average daily rate of the calendar month before (month, year)."""
    cfg = config or default_config()
    pm, py = dates.previous_month(month, year)
    selected = month_entries(entries, pm, py)
    if len(selected) < 2:
        return None
    span, rate = _average_rate(selected[0], selected[-1])
    if span <= 0:
        return None
    return safe_round(rate, cfg.rate_precision)


def monthly_totals(entries: Sequence[Entry], month: int, year: int) -> List[float]:
    """Cumulative readings for the month in order, e.g. for a sparkline."""
    return [safe_number(e.total_hours) for e in month_entries(entries, month, year)]
