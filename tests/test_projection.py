"""Tests for daily increases, monthly projection and status classification."""

import json

import pytest

from usagelogic import projection
from usagelogic.config import TrackerConfig


def test_linear_projection_over_whole_month(make_entries):
    entries = make_entries([("01-03-2024", 100), ("03-03-2024", 106)])
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["days_in_month"] == 31
    assert s["days_between"] == 2
    assert s["avg_per_day"] == 3.0
    assert s["projected_total"] == 93.0
    assert s["remaining_hours"] == 644.0
    assert s["status"] == "SAFE"
    assert s["first_total"] == 100.0 and s["latest_total"] == 106.0
    assert s["first_date"] == "01-03-2024" and s["latest_date"] == "03-03-2024"
    assert s["entry_count"] == 2
    assert s["progress_percentage"] == pytest.approx(14.1)
    assert s["has_invalid_data"] is False


def test_negative_delta_marks_invalid(make_entries):
    entries = make_entries([("01-03-2024", 100), ("02-03-2024", 80)])
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["has_invalid_data"] is True
    assert s["status"] == "INVALID_DATA"
    assert s["projected_total"] == 0.0
    assert s["remaining_hours"] == 0.0
    assert s["entries_with_increase"][1]["is_invalid"] is True
    assert s["entries_with_increase"][1]["daily_increase"] == -20.0


def test_invalid_overrides_danger(make_entries):
    entries = make_entries(
        [("01-03-2024", 0), ("02-03-2024", 400), ("03-03-2024", 300)]
    )
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["status"] == "INVALID_DATA"


def test_empty_month_is_waiting(two_months):
    s = projection.compute_monthly_stats(two_months, 4, 2024)
    assert s["status"] == "WAITING"
    assert s["remaining_hours"] == 750.0
    assert s["projected_total"] == 0.0
    assert s["entry_count"] == 0
    assert s["first_total"] is None and s["latest_date"] is None
    assert s["entries"] == [] and s["entries_with_increase"] == []
    assert s["days_in_month"] == 30


def test_single_entry_is_provisional_safe(make_entries):
    entries = make_entries([("05-04-2024", 120)])
    s = projection.compute_monthly_stats(entries, 4, 2024)
    assert s["status"] == "SAFE"
    assert s["projected_total"] == 120.0
    assert s["remaining_hours"] == 630.0
    assert s["progress_percentage"] == 16.0
    assert s["avg_per_day"] == 0.0
    assert s["entries_with_increase"][0]["daily_increase"] is None


def test_month_filter_ignores_other_months(two_months):
    """March starts from the reset reading, not February's 540."""
    s = projection.compute_monthly_stats(two_months, 3, 2024)
    assert s["entry_count"] == 3
    assert s["first_total"] == 4.0
    assert s["avg_per_day"] == 3.0
    assert s["projected_total"] == 93.0
    assert s["has_invalid_data"] is False
    assert s["entries_with_increase"][0]["daily_increase"] is None


@pytest.mark.parametrize(
    "per_day,status",
    [
        (20, "SAFE"),  # 620
        (21.75, "SAFE"),  # 674.25, just under 90% of 750
        (22, "WARNING"),  # 682
        (24, "WARNING"),  # 744
        (25, "DANGER"),  # 775
    ],
)
def test_status_thresholds(make_entries, per_day, status):
    entries = make_entries([("01-03-2024", 2), ("03-03-2024", 2 + per_day * 2)])
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["status"] == status


def test_projection_equal_to_limit_is_danger(make_entries):
    # 30-day month, 25/day -> exactly 750
    entries = make_entries([("01-04-2024", 0), ("05-04-2024", 100)])
    s = projection.compute_monthly_stats(entries, 4, 2024)
    assert s["projected_total"] == 750.0
    assert s["status"] == "DANGER"


def test_limit_and_ratio_are_configurable(make_entries):
    entries = make_entries([("01-03-2024", 100), ("03-03-2024", 106)])
    cfg = TrackerConfig(monthly_limit=100.0, warning_ratio=0.5)
    s = projection.compute_monthly_stats(entries, 3, 2024, config=cfg)
    assert s["remaining_hours"] == -6.0
    assert s["status"] == "WARNING"
    s = projection.compute_monthly_stats(
        entries, 3, 2024, config=TrackerConfig(monthly_limit=90.0)
    )
    assert s["status"] == "DANGER"


def test_same_day_duplicates_do_not_divide_by_zero(make_entries):
    """Only reachable by bypassing the validator's uniqueness rule."""
    entries = make_entries([("01-03-2024", 100), ("01-03-2024", 110)])
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["days_between"] == 0
    assert s["avg_per_day"] == 0.0
    assert s["projected_total"] == 0.0
    assert s["status"] == "SAFE"


def test_non_numeric_totals_are_neutralised(make_entries):
    entries = make_entries([("01-03-2024", 10), ("02-03-2024", "oops"), ("03-03-2024", 16)])
    inc = projection.compute_daily_increase(entries)
    assert [e["daily_increase"] for e in inc] == [None, 0.0, 0.0]
    assert not projection.has_invalid_data(inc)
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["avg_per_day"] == 3.0


def test_rounding_precision(make_entries):
    entries = make_entries([("01-03-2024", 0), ("04-03-2024", 10)])
    s = projection.compute_monthly_stats(entries, 3, 2024)
    assert s["avg_per_day"] == 3.3333
    assert s["projected_total"] == 103.33
    assert s["progress_percentage"] == 1.3


def test_stats_are_idempotent(two_months):
    a = projection.compute_monthly_stats(two_months, 3, 2024)
    b = projection.compute_monthly_stats(two_months, 3, 2024)
    assert a == b

    def _plain(s):
        return json.dumps({k: v for k, v in s.items() if k != "entries"}, sort_keys=True)

    assert _plain(a) == _plain(b)


def test_previous_month_average(two_months, make_entries):
    # February: 10 -> 540 over 28 days
    assert projection.previous_month_average(two_months, 3, 2024) == pytest.approx(18.9286)
    assert projection.previous_month_average(two_months, 2, 2024) is None
    single = make_entries([("01-02-2024", 10), ("01-03-2024", 4)])
    assert projection.previous_month_average(single, 3, 2024) is None


def test_previous_month_average_wraps_year(make_entries):
    entries = make_entries([("01-12-2023", 0), ("11-12-2023", 50), ("02-01-2024", 1)])
    assert projection.previous_month_average(entries, 1, 2024) == 5.0


def test_monthly_totals_sparkline(two_months):
    assert projection.monthly_totals(two_months, 3, 2024) == [4.0, 10.0, 16.0]
    assert projection.monthly_totals(two_months, 5, 2024) == []


def test_halves_round_up(make_entries):
    # 750 - 0.375 = 749.625 exactly in binary
    s = projection.compute_monthly_stats(make_entries([("01-03-2024", 0.375)]), 3, 2024)
    assert s["remaining_hours"] == 749.63
    assert projection.safe_round(0.125, 2) == 0.13
    assert projection.safe_round(-0.125, 2) == -0.13
    assert projection.safe_round(float("nan"), 2) == 0.0


def test_projection_on_warning_threshold_is_safe(make_entries):
    """The warning test is strictly greater than ratio x limit."""
    # 22.5/day over 30-day April -> exactly 675 = 0.9 x 750
    entries = make_entries([("01-04-2024", 0), ("03-04-2024", 45)])
    s = projection.compute_monthly_stats(entries, 4, 2024)
    assert s["projected_total"] == 675.0
    assert s["status"] == "SAFE"

    # 10/day over 31-day March -> exactly 310 = 0.5 x 620
    cfg = TrackerConfig(monthly_limit=620.0, warning_ratio=0.5)
    entries = make_entries([("01-03-2024", 0), ("03-03-2024", 20)])
    s = projection.compute_monthly_stats(entries, 3, 2024, config=cfg)
    assert s["projected_total"] == 310.0
    assert s["status"] == "SAFE"
    entries = make_entries([("01-03-2024", 0), ("03-03-2024", 20.2)])
    s = projection.compute_monthly_stats(entries, 3, 2024, config=cfg)
    assert s["status"] == "WARNING"
