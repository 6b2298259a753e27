from datetime import datetime

import pytest

from expense_tracker.models import TimeFrame
from expense_tracker.services.timeframes import (
    days_in_period,
    filter_expenses,
    months_in_period,
    period_length_days,
    previous_window,
    shift_months,
    window,
)

from conftest import NOW, make_expense


def test_month_filter_example():
    march_first = make_expense(10, date=datetime(2024, 3, 1))
    feb_end = make_expense(20, date=datetime(2024, 2, 28))
    kept = filter_expenses([march_first, feb_end], TimeFrame.MONTH, datetime(2024, 3, 15))
    assert kept == [march_first]


def test_week_starts_on_monday():
    w = window(TimeFrame.WEEK, NOW)
    assert w.start == datetime(2024, 3, 11)
    assert w.end == datetime(2024, 3, 18)
    assert w.contains(datetime(2024, 3, 17, 23, 59))
    assert not w.contains(datetime(2024, 3, 18))


def test_today_and_year_windows():
    today = window(TimeFrame.TODAY, NOW)
    assert (today.start, today.end) == (datetime(2024, 3, 15), datetime(2024, 3, 16))
    year = window(TimeFrame.YEAR, NOW)
    assert (year.start, year.end) == (datetime(2024, 1, 1), datetime(2025, 1, 1))


def test_all_admits_everything():
    old = make_expense(5, date=datetime(1999, 1, 1))
    future = make_expense(5, date=datetime(2030, 1, 1))
    assert window(TimeFrame.ALL, NOW) is None
    assert filter_expenses([old, future], TimeFrame.ALL, NOW) == [old, future]


def test_quarter_is_rolling_and_closed():
    w = window(TimeFrame.QUARTER, NOW)
    assert w.start == datetime(2023, 12, 15, 12, 0)
    assert w.end == NOW
    assert w.contains(NOW)
    assert w.contains(datetime(2023, 12, 15, 12, 0))
    assert not w.contains(datetime(2023, 12, 15, 11, 59))


def test_half_year_lookback():
    w = window(TimeFrame.HALF_YEAR, NOW)
    assert w.start == datetime(2023, 9, 15, 12, 0)


def test_filter_preserves_store_order():
    items = [
        make_expense(1, date=datetime(2024, 3, 10)),
        make_expense(2, date=datetime(2024, 3, 2)),
        make_expense(3, date=datetime(2024, 3, 14)),
    ]
    assert [e.amount for e in filter_expenses(items, TimeFrame.MONTH, NOW)] == [1, 2, 3]


def test_shift_months_clamps_day():
    assert shift_months(datetime(2024, 5, 31), -1) == datetime(2024, 4, 30)
    assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
    assert shift_months(datetime(2024, 1, 15), -3) == datetime(2023, 10, 15)


def test_previous_windows():
    month = previous_window(TimeFrame.MONTH, NOW)
    assert (month.start, month.end) == (datetime(2024, 2, 1), datetime(2024, 3, 1))
    week = previous_window(TimeFrame.WEEK, NOW)
    assert (week.start, week.end) == (datetime(2024, 3, 4), datetime(2024, 3, 11))
    year = previous_window(TimeFrame.YEAR, NOW)
    assert (year.start, year.end) == (datetime(2023, 1, 1), datetime(2024, 1, 1))
    quarter = previous_window(TimeFrame.QUARTER, NOW)
    assert quarter.start == datetime(2023, 9, 15, 12, 0)
    assert quarter.end == datetime(2023, 12, 15, 12, 0)
    assert not quarter.contains(quarter.end)
    assert previous_window(TimeFrame.ALL, NOW) is None


def test_previous_day_and_week_are_calendar_aligned():
    today = previous_window(TimeFrame.TODAY, NOW)
    assert (today.start, today.end) == (datetime(2024, 3, 14), datetime(2024, 3, 15))
    # a Monday reference still steps back a whole ISO week
    week = previous_window(TimeFrame.WEEK, datetime(2024, 3, 11, 0, 5))
    assert (week.start, week.end) == (datetime(2024, 3, 4), datetime(2024, 3, 11))


def test_days_in_period():
    assert days_in_period(TimeFrame.TODAY, NOW) == 1
    assert days_in_period(TimeFrame.WEEK, NOW) == 5
    assert days_in_period(TimeFrame.MONTH, NOW) == 15
    assert days_in_period(TimeFrame.YEAR, NOW) == 75
    assert days_in_period(TimeFrame.QUARTER, NOW) == 90
    assert days_in_period(TimeFrame.HALF_YEAR, NOW) == 180


def test_days_in_period_all_uses_earliest_expense():
    expenses = [make_expense(1, date=datetime(2024, 3, 5, 12, 0)), make_expense(1)]
    assert days_in_period(TimeFrame.ALL, NOW, expenses) == 10
    assert days_in_period(TimeFrame.ALL, NOW, []) == 1
    assert days_in_period(TimeFrame.ALL, NOW, [make_expense(1)]) == 1


def test_period_lengths_and_months():
    assert period_length_days(TimeFrame.ALL) == 30
    assert period_length_days(TimeFrame.YEAR) == 365
    assert months_in_period(TimeFrame.WEEK) == 0.25
    assert months_in_period(TimeFrame.HALF_YEAR) == 6
    with pytest.raises(ValueError):
        months_in_period(TimeFrame.TODAY)
