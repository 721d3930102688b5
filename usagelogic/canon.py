from __future__ import annotations
from datetime import timedelta
from typing import Final, Dict

DATE_FORMAT: Final[str] = "DD-MM-YYYY"
DATE_PATTERN: Final[str] = r"^(\d{2})-(\d{2})-(\d{4})$"

FREE_HOUR_LIMIT: Final[float] = 750.0
IST_OFFSET: Final[timedelta] = timedelta(hours=5, minutes=30)
WARNING_RATIO: Final[float] = 0.9
HISTORY_LIMIT: Final[int] = 20

# Decimal places for rounded outputs
HOURS_PRECISION: Final[int] = 2
RATE_PRECISION: Final[int] = 4
PERCENT_PRECISION: Final[int] = 1

STATUSES: Final[tuple[str, ...]] = ("WAITING", "SAFE", "WARNING", "DANGER", "INVALID_DATA")

STATUS_LABELS: Dict[str, str] = {
    "WAITING": "WAITING FOR DATA",
    "SAFE": "SAFE",
    "WARNING": "WARNING",
    "DANGER": "DANGER",
    "INVALID_DATA": "INVALID DATA",
}

MONTH_NAMES: Final[tuple[str, ...]] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
