from __future__ import annotations
from typing import Optional, Sequence, cast

import pandas as pd

from . import canon, dates, projection
from .config import TrackerConfig, default_config
from .types import Entry, MonthTransition, SummaryPayload

OVERVIEW_COLUMNS = [
    "month",
    "year",
    "label",
    "entry_count",
    "latest_total",
    "avg_per_day",
    "projected_total",
    "remaining_hours",
    "status",
]


def month_transition(
    entries: Sequence[Entry], month: int, year: int
) -> Optional[MonthTransition]:
    """
    Describe a counter reset: the month has no readings yet but the previous
    month does. Returns None otherwise.
    """
    if not 1 <= month <= 12 or projection.month_entries(entries, month, year):
        return None
    pm, py = dates.previous_month(month, year)
    prev = projection.month_entries(entries, pm, py)
    if not prev:
        return None
    return {
        "current_month": canon.MONTH_NAMES[month - 1],
        "previous_month": canon.MONTH_NAMES[pm - 1],
        "previous_year": py,
        "previous_last_hours": projection.safe_number(prev[-1].total_hours),
    }


def _change_pct(
    current: float, previous: Optional[float], ndigits: int
) -> Optional[float]:
    if previous is None or previous == 0:
        return None
    return projection.safe_round((current - previous) / abs(previous) * 100.0, ndigits)


def summarise(
    entries: Sequence[Entry],
    month: int,
    year: int,
    *,
    config: Optional[TrackerConfig] = None,
) -> SummaryPayload:
    cfg = config or default_config()
    stats = projection.compute_monthly_stats(entries, month, year, config=cfg)
    prev_avg = projection.previous_month_average(entries, month, year, config=cfg)

    # A trend comparison only means something once this month has a rate
    has_rate = stats["entry_count"] >= 2 and not stats["has_invalid_data"]
    change = (
        _change_pct(stats["avg_per_day"], prev_avg, cfg.percent_precision)
        if has_rate
        else None
    )

    payload: SummaryPayload = cast(
        SummaryPayload,
        {
            "meta": {
                "month": month,
                "year": year,
                "label": dates.month_label(month, year),
                "monthly_limit": float(cfg.monthly_limit),
                "status_label": canon.STATUS_LABELS[stats["status"]],
            },
            "stats": stats,
            "trend": {
                "previous_avg_per_day": prev_avg,
                "avg_change_pct": change,
                "sparkline": projection.monthly_totals(entries, month, year),
            },
            "transition": month_transition(entries, month, year),
        },
    )
    return payload


def monthly_overview(
    entries: Sequence[Entry], *, config: Optional[TrackerConfig] = None
) -> pd.DataFrame:
    """One row of headline figures per month with readings, newest first."""
    cfg = config or default_config()
    rows = []
    for info in dates.available_months(e.date for e in entries):
        stats = projection.compute_monthly_stats(
            entries, info["month"], info["year"], config=cfg
        )
        rows.append(
            {
                "month": info["month"],
                "year": info["year"],
                "label": info["label"],
                "entry_count": stats["entry_count"],
                "latest_total": stats["latest_total"],
                "avg_per_day": stats["avg_per_day"],
                "projected_total": stats["projected_total"],
                "remaining_hours": stats["remaining_hours"],
                "status": stats["status"],
            }
        )
    return pd.DataFrame(rows, columns=OVERVIEW_COLUMNS)
