from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from . import canon
from .exceptions import ConfigError, require


@dataclass(frozen=True)
class TrackerConfig:
    # Free-tier allowance per calendar month
    monthly_limit: float = canon.FREE_HOUR_LIMIT
    # Fixed offset used for "today" (IST by default)
    utc_offset: timedelta = canon.IST_OFFSET
    warning_ratio: float = canon.WARNING_RATIO  # fraction of limit that flags WARNING
    history_limit: int = canon.HISTORY_LIMIT

    hours_precision: int = canon.HOURS_PRECISION
    rate_precision: int = canon.RATE_PRECISION
    percent_precision: int = canon.PERCENT_PRECISION

    def __post_init__(self) -> None:
        require(self.monthly_limit > 0, "monthly_limit must be positive", ConfigError)
        require(
            0 < self.warning_ratio <= 1,
            "warning_ratio must be in (0, 1]",
            ConfigError,
        )
        require(self.history_limit >= 1, "history_limit must be >= 1", ConfigError)
        require(
            abs(self.utc_offset) < timedelta(hours=24),
            "utc_offset must be strictly within +/-24h",
            ConfigError,
        )

    @property
    def warning_threshold(self) -> float:
        return self.monthly_limit * self.warning_ratio


def default_config() -> TrackerConfig:
    return TrackerConfig()
