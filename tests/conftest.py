from datetime import date, datetime, timezone

import pytest

from usagelogic import config as ulconfig
from usagelogic.types import Entry

def _entries(rows):
    """[(date, hours), ...] -> Entry list with predictable ids e0, e1, ..."""
    return [Entry(id=f"e{i}", date=d, total_hours=h) for i, (d, h) in enumerate(rows)]


@pytest.fixture
def make_entries():
    return _entries


@pytest.fixture
def cfg():
    return ulconfig.default_config()


@pytest.fixture
def march_pair():
    return _entries([("01-03-2024", 100), ("15-03-2024", 200)])


@pytest.fixture
def two_months():
    # February counter ends at 540, March restarts near zero
    return _entries(
        [
            ("01-02-2024", 10),
            ("11-02-2024", 210),
            ("29-02-2024", 540),
            ("01-03-2024", 4),
            ("03-03-2024", 10),
            ("05-03-2024", 16),
        ]
    )


@pytest.fixture
def today():
    # fixed reference day well after the sample data
    return date(2024, 6, 15)


@pytest.fixture
def fixed_clock():
    now = datetime(2024, 6, 15, 6, 0, tzinfo=timezone.utc)
    return lambda: now
