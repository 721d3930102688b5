# usagelogic/dates.py
from __future__ import annotations
import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from . import canon
from .types import MonthInfo

_DATE_RE = re.compile(canon.DATE_PATTERN, re.ASCII)

_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def now_local(utc_offset: timedelta = canon.IST_OFFSET) -> datetime:
    """Current instant as an aware datetime at the fixed offset."""
    return datetime.now(timezone.utc).astimezone(timezone(utc_offset))


def today_local(utc_offset: timedelta = canon.IST_OFFSET) -> date:
    return now_local(utc_offset).date()


def today_text(utc_offset: timedelta = canon.IST_OFFSET) -> str:
    return format_date(today_local(utc_offset))


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(month: int, year: int) -> int:
    """Day count for a 1-indexed month; 0 when month is outside 1–12."""
    if month < 1 or month > 12:
        return 0
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_PER_MONTH[month - 1]


def parse_date(text: object) -> Optional[date]:
    """Parse DD-MM-YYYY text, returning None for anything that is not a real day."""
    if not isinstance(text, str):
        return None
    m = _DATE_RE.fullmatch(text)
    if m is None:
        return None
    dd, mm, yyyy = (int(g) for g in m.groups())
    if yyyy < 1 or mm < 1 or mm > 12:
        return None
    if dd < 1 or dd > days_in_month(mm, yyyy):
        return None
    return date(yyyy, mm, dd)


def format_date(value: object) -> str:
    if not isinstance(value, date):
        return ""
    return f"{value.day:02d}-{value.month:02d}-{value.year:04d}"


def sortable_key(text: object) -> str:
    """DD-MM-YYYY → YYYY-MM-DD so plain string order is chronological."""
    d = parse_date(text)
    if d is None:
        return ""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def month_year(text: object) -> Optional[Tuple[int, int]]:
    d = parse_date(text)
    if d is None:
        return None
    return d.month, d.year


def is_in_month(text: object, month: int, year: int) -> bool:
    return month_year(text) == (month, year)


def is_future(
    text: object,
    *,
    today: Optional[date] = None,
    utc_offset: timedelta = canon.IST_OFFSET,
) -> bool:
    """True when the day is strictly after today at the fixed offset."""
    d = parse_date(text)
    if d is None:
        return False
    ref = today if today is not None else today_local(utc_offset)
    return d > ref


def days_between(a: object, b: object) -> int:
    d1 = parse_date(a)
    d2 = parse_date(b)
    if d1 is None or d2 is None:
        return 0
    return abs((d2 - d1).days)


def previous_month(month: int, year: int) -> Tuple[int, int]:
    if month <= 1:
        return 12, year - 1
    return month - 1, year


def month_label(month: int, year: int) -> str:
    if month < 1 or month > 12:
        return str(year)
    return f"{canon.MONTH_NAMES[month - 1]} {year}"


def available_months(dates: Iterable[object]) -> List[MonthInfo]:
    """
    Unique months present in ``dates``, most recent first.
    Unparseable dates are skipped.
    """
    seen: dict[Tuple[int, int], MonthInfo] = {}
    for text in dates:
        my = month_year(text)
        if my is None or my in seen:
            continue
        month, year = my
        seen[my] = {"month": month, "year": year, "label": month_label(month, year)}
    return [seen[k] for k in sorted(seen, key=lambda k: (k[1], k[0]), reverse=True)]
