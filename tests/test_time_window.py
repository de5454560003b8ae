"""Tests for sync window calculation."""

from datetime import datetime, timedelta, timezone

import pytest

from models.events import TimeWindow
from services.calendar import add_months, get_time_window


def test_one_month_each_side():
    now = datetime(2024, 6, 15, tzinfo=timezone.utc)
    window = get_time_window(1, 1, now=now)
    assert window.start == datetime(2024, 5, 15, tzinfo=timezone.utc)
    assert window.end == datetime(2024, 7, 15, tzinfo=timezone.utc)


def test_zero_months_gives_single_instant():
    now = datetime(2024, 6, 15, 12, 30, tzinfo=timezone.utc)
    window = get_time_window(0, 0, now=now)
    assert window.start == window.end == now


def test_window_crosses_year_boundary():
    now = datetime(2024, 1, 10, tzinfo=timezone.utc)
    window = get_time_window(2, 12, now=now)
    assert window.start == datetime(2023, 11, 10, tzinfo=timezone.utc)
    assert window.end == datetime(2025, 1, 10, tzinfo=timezone.utc)


def test_naive_now_is_treated_as_utc():
    window = get_time_window(1, 1, now=datetime(2024, 6, 15))
    assert window.start.tzinfo is not None
    assert window.start == datetime(2024, 5, 15, tzinfo=timezone.utc)


def test_non_utc_now_is_converted():
    plus_two = timezone(timedelta(hours=2))
    window = get_time_window(0, 0, now=datetime(2024, 6, 15, 2, 0, tzinfo=plus_two))
    assert window.start == datetime(2024, 6, 15, 0, 0, tzinfo=timezone.utc)
    assert window.start.utcoffset() == timedelta(0)


def test_default_now_brackets_current_time():
    before = datetime.now(timezone.utc)
    window = get_time_window(1, 1)
    assert window.start < before < window.end


def test_negative_months_rejected():
    with pytest.raises(ValueError):
        get_time_window(-1, 1)


@pytest.mark.parametrize(
    "value, months, expected",
    [
        (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
        (datetime(2023, 3, 31), -1, datetime(2023, 2, 28)),
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2024, 12, 15), 1, datetime(2025, 1, 15)),
        (datetime(2024, 5, 31), 1, datetime(2024, 6, 30)),
    ],
)
def test_add_months_clamps_day(value, months, expected):
    assert add_months(value, months) == expected


def test_time_window_rejects_reversed_bounds():
    start = datetime(2024, 6, 2, tzinfo=timezone.utc)
    end = datetime(2024, 6, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        TimeWindow(start=start, end=end)


def test_time_window_rejects_naive_bounds():
    with pytest.raises(ValueError):
        TimeWindow(start=datetime(2024, 6, 1), end=datetime(2024, 6, 2))
