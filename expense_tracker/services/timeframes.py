"""Time-window selection for expense filtering.

Calendar frames (today, week, month, year) are half-open and aligned to the
period containing `now`; weeks follow ISO numbering and start on Monday.
Quarter and half-year frames are rolling lookbacks `[now - N months, now]`.
The two kinds are not interchangeable: a quarter is not "this calendar
quarter".

`now` is always passed in explicitly so every function here is pure.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from expense_tracker.models import Expense, TimeFrame, TimeWindow

_ROLLING_MONTHS: Dict[TimeFrame, int] = {
    TimeFrame.QUARTER: 3,
    TimeFrame.HALF_YEAR: 6,
}

MONTHS_IN_PERIOD: Dict[TimeFrame, float] = {
    TimeFrame.WEEK: 0.25,
    TimeFrame.MONTH: 1,
    TimeFrame.QUARTER: 3,
    TimeFrame.HALF_YEAR: 6,
    TimeFrame.YEAR: 12,
}

# Fixed calendar lengths used by frequency heuristics
PERIOD_LENGTH_DAYS: Dict[TimeFrame, int] = {
    TimeFrame.ALL: 30,
    TimeFrame.TODAY: 1,
    TimeFrame.WEEK: 7,
    TimeFrame.MONTH: 30,
    TimeFrame.QUARTER: 90,
    TimeFrame.HALF_YEAR: 180,
    TimeFrame.YEAR: 365,
}


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime) -> datetime:
    return start_of_day(moment) - timedelta(days=moment.weekday())


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment).replace(day=1)


def start_of_year(moment: datetime) -> datetime:
    return start_of_day(moment).replace(month=1, day=1)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move by whole calendar months, clamping the day to the target month."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window(frame: TimeFrame, now: datetime) -> Optional[TimeWindow]:
    """Return the window for `frame` at `now`; None for `all` (no bounds)."""
    if frame is TimeFrame.ALL:
        return None
    if frame is TimeFrame.TODAY:
        start = start_of_day(now)
        return TimeWindow(start, start + timedelta(days=1))
    if frame is TimeFrame.WEEK:
        start = start_of_week(now)
        return TimeWindow(start, start + timedelta(days=7))
    if frame is TimeFrame.MONTH:
        start = start_of_month(now)
        return TimeWindow(start, shift_months(start, 1))
    if frame is TimeFrame.YEAR:
        start = start_of_year(now)
        return TimeWindow(start, start.replace(year=start.year + 1))
    months = _ROLLING_MONTHS[frame]
    return TimeWindow(shift_months(now, -months), now, closed=True)


def previous_window(frame: TimeFrame, now: datetime) -> Optional[TimeWindow]:
    """Immediately preceding window of the same length; None for `all`."""
    if frame is TimeFrame.ALL:
        return None
    if frame.is_rolling:
        months = _ROLLING_MONTHS[frame]
        return TimeWindow(shift_months(now, -2 * months), shift_months(now, -months))
    if frame is TimeFrame.TODAY:
        start = start_of_day(now)
        return TimeWindow(start - timedelta(days=1), start)
    if frame is TimeFrame.WEEK:
        start = start_of_week(now)
        return TimeWindow(start - timedelta(days=7), start)
    if frame is TimeFrame.MONTH:
        start = start_of_month(now)
        return TimeWindow(shift_months(start, -1), start)
    start = start_of_year(now)
    return TimeWindow(start.replace(year=start.year - 1), start)


def filter_expenses(
    expenses: Iterable[Expense], frame: TimeFrame, now: datetime
) -> List[Expense]:
    w = window(frame, now)
    if w is None:
        return list(expenses)
    return [e for e in expenses if w.contains(e.date)]


def filter_window(expenses: Iterable[Expense], w: Optional[TimeWindow]) -> List[Expense]:
    if w is None:
        return list(expenses)
    return [e for e in expenses if w.contains(e.date)]


def days_in_period(
    frame: TimeFrame, now: datetime, expenses: Iterable[Expense] = ()
) -> int:
    """Denominator for the daily average.

    Open calendar periods count the days elapsed so far (inclusive); rolling
    lookbacks use fixed 90 / 180 day approximations rather than the actual
    calendar span.
    """
    today = now.date()
    if frame is TimeFrame.TODAY:
        return 1
    if frame is TimeFrame.WEEK:
        return (today - start_of_week(now).date()).days + 1
    if frame is TimeFrame.MONTH:
        return (today - start_of_month(now).date()).days + 1
    if frame is TimeFrame.YEAR:
        return (today - start_of_year(now).date()).days + 1
    if frame is TimeFrame.QUARTER:
        return 90
    if frame is TimeFrame.HALF_YEAR:
        return 180
    dates = [e.date for e in expenses]
    if not dates:
        return 1
    return max(1, (now - min(dates)).days)


def period_length_days(frame: TimeFrame) -> int:
    return PERIOD_LENGTH_DAYS[frame]


def months_in_period(frame: TimeFrame) -> float:
    try:
        return MONTHS_IN_PERIOD[frame]
    except KeyError:
        raise ValueError(f"time frame '{frame.value}' has no month length") from None
