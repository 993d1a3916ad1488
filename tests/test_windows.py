from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from arcade_analytics.events import TimeWindow, WindowKind
from arcade_analytics.exceptions import InvariantViolation
from arcade_analytics.windows import resolve_windows

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
TICK = timedelta(microseconds=1)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_last30_windows_are_back_to_back():
    current, comparison = resolve_windows(WindowKind.LAST30, NOW)

    assert current.start == utc(2024, 2, 14, 12, 0)
    assert current.end == NOW
    assert comparison.start == utc(2024, 1, 15, 12, 0)
    assert comparison.end == current.start - TICK
    assert current.kind is WindowKind.LAST30


def test_this_month_compares_against_full_previous_month():
    current, comparison = resolve_windows(WindowKind.THIS_MONTH, NOW)

    assert current.start == utc(2024, 3, 1)
    assert current.end == NOW
    assert comparison.start == utc(2024, 2, 1)
    # 2024 is a leap year
    assert comparison.end == utc(2024, 2, 29, 23, 59, 59, 999999)


def test_prev_month_uses_two_full_months():
    current, comparison = resolve_windows("prev_month", NOW)

    assert current.start == utc(2024, 2, 1)
    assert current.end == utc(2024, 2, 29, 23, 59, 59, 999999)
    assert comparison.start == utc(2024, 1, 1)
    assert comparison.end == utc(2024, 1, 31, 23, 59, 59, 999999)


def test_prev_month_crosses_year_boundary():
    current, comparison = resolve_windows(
        WindowKind.PREV_MONTH, utc(2024, 1, 10, 8, 30)
    )

    assert current.start == utc(2023, 12, 1)
    assert comparison.start == utc(2023, 11, 1)
    assert comparison.end == utc(2023, 11, 30, 23, 59, 59, 999999)


def test_month_boundaries_follow_configured_zone():
    new_york = ZoneInfo("America/New_York")
    # 03:00 UTC on March 1st is still February 29th in New York.
    current, comparison = resolve_windows(
        WindowKind.THIS_MONTH, utc(2024, 3, 1, 3, 0), tz=new_york
    )

    assert current.start == utc(2024, 2, 1, 5, 0)
    assert comparison.start == utc(2024, 1, 1, 5, 0)


def test_naive_now_is_treated_as_utc():
    current, _ = resolve_windows(WindowKind.LAST30, datetime(2024, 3, 15, 12, 0))
    assert current.end == NOW


def test_resolution_is_pure():
    assert resolve_windows(WindowKind.LAST30, NOW) == resolve_windows(
        WindowKind.LAST30, NOW
    )


def test_window_rejects_start_after_end():
    with pytest.raises(InvariantViolation):
        TimeWindow(utc(2024, 3, 2), utc(2024, 3, 1), WindowKind.LAST30)


def test_window_contains_both_ends():
    window = TimeWindow(utc(2024, 3, 1), utc(2024, 3, 2), WindowKind.LAST30)

    assert window.contains(utc(2024, 3, 1))
    assert window.contains(utc(2024, 3, 2))
    assert not window.contains(utc(2024, 3, 2) + TICK)
