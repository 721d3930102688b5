from __future__ import annotations
import logging
import math
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from . import dates, projection
from .config import TrackerConfig, default_config
from .types import Entry, ValidationErrors, ValidationResult

logger = logging.getLogger(__name__)


def _format_hours(value: float) -> str:
    v = float(value)
    return str(int(v)) if v.is_integer() else str(v)


def _parse_hours(raw: Any) -> tuple[Optional[float], Optional[str]]:
    """Return (hours, error). Exactly one of the two is None."""
    if raw is None:
        return None, "Total hours is required"
    if isinstance(raw, bool):
        return None, "Total hours must be a valid number"
    text = str(raw).strip()
    if text == "":
        return None, "Total hours is required"
    try:
        hours = float(text)
    except ValueError:
        return None, "Total hours must be a valid number"
    if not math.isfinite(hours):
        return None, "Total hours must be a valid number"
    if hours < 0:
        return None, "Total hours must be >= 0"
    return hours, None


def _date_error(
    text: Any,
    existing: Sequence[Entry],
    editing_id: Optional[str],
    config: TrackerConfig,
    today: Optional[date],
) -> Optional[str]:
    if text is None or (isinstance(text, str) and text.strip() == ""):
        return "Date is required"
    if dates.parse_date(text) is None:
        return "Invalid date. Use DD-MM-YYYY format"
    if dates.is_future(text, today=today, utc_offset=config.utc_offset):
        return "Date cannot be in the future"
    if any(e.date == text and e.id != editing_id for e in existing):
        return f"Entry for {text} already exists"
    return None


def _neighbour_error(
    text: str,
    hours: float,
    existing: Sequence[Entry],
    editing_id: Optional[str],
) -> Optional[str]:
    """
    Month-scoped monotonic check against the closest same-month readings.

    Entries from other months are ignored, so the first reading of a month
    has no floor (the counter resets).
    """
    my = dates.month_year(text)
    if my is None:
        return None
    month, year = my
    key = dates.sortable_key(text)

    # (sort key, total, entry); readings whose total does not coerce are skipped
    same_month = []
    for e in existing:
        if e.id == editing_id or not dates.is_in_month(e.date, month, year):
            continue
        total = projection.to_number(e.total_hours)
        if total is None:
            logger.debug("Skipping unreadable total on %s: %r", e.date, e.total_hours)
            continue
        same_month.append((dates.sortable_key(e.date), total, e))
    before = [n for n in same_month if n[0] < key]
    after = [n for n in same_month if n[0] > key]

    if before:
        _, floor, prev = max(before, key=lambda n: n[0])
        if hours < floor:
            return (
                f"Must be >= {_format_hours(floor)} "
                f"(previous entry on {prev.date})"
            )
    if after:
        _, ceiling, nxt = min(after, key=lambda n: n[0])
        if hours > ceiling:
            return (
                f"Must be <= {_format_hours(ceiling)} "
                f"(next entry on {nxt.date})"
            )
    return None


def validate_entry(
    candidate: Mapping[str, Any],
    existing: Sequence[Entry] = (),
    editing_id: Optional[str] = None,
    *,
    config: Optional[TrackerConfig] = None,
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Check a new or edited reading against the existing ones.

    ``candidate`` needs ``date`` (DD-MM-YYYY) and ``total_hours`` (number or
    numeric string). The entry with ``editing_id`` is left out of the
    duplicate and neighbour checks. Never raises; problems are reported per
    field in ``errors``.
    """
    cfg = config or default_config()
    errors: ValidationErrors = {}

    text = candidate.get("date")
    date_err = _date_error(text, existing, editing_id, cfg, today)
    if date_err is not None:
        errors["date"] = date_err

    hours, hours_err = _parse_hours(candidate.get("total_hours"))
    if hours_err is None and hours is not None and "date" not in errors:
        hours_err = _neighbour_error(str(text), hours, existing, editing_id)
    if hours_err is not None:
        errors["hours"] = hours_err

    if errors:
        logger.debug("Rejected entry %r: %s", text, errors)
    return {"valid": not errors, "errors": errors}


def visible_error(
    errors: Mapping[str, str], touched: Mapping[str, bool], field: str
) -> Optional[str]:
    """Return a field's error only once the user has touched that field."""
    if touched.get(field) and errors.get(field):
        return errors[field]
    return None
