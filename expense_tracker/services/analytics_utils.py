from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from expense_tracker.models import Category, Expense, TimeFrame
from expense_tracker.models.category import (
    DISCRETIONARY_CATEGORIES,
    ESSENTIAL_CATEGORIES,
    SAVINGS_CANDIDATE_CATEGORIES,
)
from expense_tracker.services.money import percent_of, safe_ratio
from expense_tracker.services.rates.conversion import CurrencyConverter
from expense_tracker.services.timeframes import (
    days_in_period,
    filter_window,
    previous_window,
    shift_months,
    start_of_month,
    window,
)

"""Aggregation helpers over converted expenses.

Scopes implemented:
    - Totals, category / day / weekday breakdowns
    - Daily average with per-frame day counts
    - Spending consistency and essential / discretionary shares
    - Monthly and quarterly series, variance, period-over-period change
    - Trend points (daily + cumulative), category trends, savings potential

Design notes:
    Every function takes already-converted items, so the display currency is
    decided once by the caller (`convert_expenses`) and never read from
    shared state. All ratios guard a zero denominator.
"""

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


@dataclass(frozen=True)
class ConvertedExpense:
    expense: Expense
    amount: float

    @property
    def category(self) -> Category:
        return self.expense.category

    @property
    def date(self) -> datetime:
        return self.expense.date


def convert_expenses(
    expenses: Iterable[Expense], converter: CurrencyConverter, currency: str
) -> List[ConvertedExpense]:
    return [
        ConvertedExpense(expense=e, amount=converter.converted_amount(e, currency))
        for e in expenses
    ]


def total(items: Iterable[ConvertedExpense]) -> float:
    return sum(i.amount for i in items)


# ---------------- Breakdowns -----------------
@dataclass(frozen=True)
class CategoryBreakdownItem:
    category: Category
    total: float
    percent: float


def category_totals(items: Iterable[ConvertedExpense]) -> Dict[Category, float]:
    totals: Dict[Category, float] = defaultdict(float)
    for i in items:
        totals[i.category] += i.amount
    return dict(totals)


def by_category(items: Sequence[ConvertedExpense]) -> List[CategoryBreakdownItem]:
    """Category totals sorted descending by amount, with percent of the total."""
    grand = total(items)
    rows = [
        CategoryBreakdownItem(category=c, total=t, percent=percent_of(t, grand))
        for c, t in category_totals(items).items()
    ]
    rows.sort(key=lambda r: r.total, reverse=True)
    return rows


def by_day(items: Iterable[ConvertedExpense]) -> Dict[date, float]:
    totals: Dict[date, float] = defaultdict(float)
    for i in items:
        totals[i.date.date()] += i.amount
    return dict(sorted(totals.items()))


@dataclass(frozen=True)
class WeekdaySpending:
    weekday: str
    total: float
    count: int
    average: float


def by_weekday(items: Iterable[ConvertedExpense]) -> List[WeekdaySpending]:
    """Per-weekday totals and average per transaction, Monday first.

    Weekdays without expenses are omitted.
    """
    totals: Dict[int, float] = defaultdict(float)
    counts: Dict[int, int] = defaultdict(int)
    for i in items:
        wd = i.date.weekday()
        totals[wd] += i.amount
        counts[wd] += 1
    return [
        WeekdaySpending(
            weekday=WEEKDAY_NAMES[wd],
            total=totals[wd],
            count=counts[wd],
            average=totals[wd] / counts[wd],
        )
        for wd in sorted(totals)
    ]


# ---------------- Averages & ratios -----------------
def daily_average(
    items: Sequence[ConvertedExpense], frame: TimeFrame, now: datetime
) -> float:
    days = days_in_period(frame, now, (i.expense for i in items))
    return safe_ratio(total(items), days)


def consistency(items: Iterable[ConvertedExpense]) -> float:
    """1 - (coefficient of variation of daily totals) / 2, clamped to [0, 1].

    An empty set counts as perfectly consistent.
    """
    values = list(by_day(items).values())
    if not values:
        return 1.0
    mean = sum(values) / len(values)
    if mean <= 0:
        return 1.0
    stddev = math.sqrt(variance(values))
    cv = stddev / mean
    return max(0.0, min(1.0, 1 - cv / 2))


def _subset_percentage(items: Sequence[ConvertedExpense], categories) -> float:
    grand = total(items)
    part = sum(i.amount for i in items if i.category in categories)
    return percent_of(part, grand)


def essential_percentage(items: Sequence[ConvertedExpense]) -> float:
    return _subset_percentage(items, ESSENTIAL_CATEGORIES)


def discretionary_percentage(items: Sequence[ConvertedExpense]) -> float:
    return _subset_percentage(items, DISCRETIONARY_CATEGORIES)


def variance(values: Sequence[float]) -> float:
    """Population variance; 0 for an empty sequence."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


# ---------------- Series -----------------
def monthly_totals(
    items: Iterable[ConvertedExpense], months: int, now: datetime
) -> List[float]:
    """Totals for the `months` calendar months ending with now's month, oldest first."""
    buckets: Dict[tuple, float] = defaultdict(float)
    for i in items:
        buckets[(i.date.year, i.date.month)] += i.amount
    result = []
    for offset in range(months - 1, -1, -1):
        month_start = start_of_month(shift_months(now, -offset))
        result.append(buckets.get((month_start.year, month_start.month), 0.0))
    return result


def quarterly_totals(items: Iterable[ConvertedExpense], now: datetime) -> List[float]:
    monthly = monthly_totals(items, 12, now)
    return [sum(monthly[i : i + 3]) for i in range(0, len(monthly), 3)]


def spending_change_percentage(
    current: float, previous: float, frame: TimeFrame
) -> float:
    """Percent change versus the previous period, normalised per month for long frames."""
    if previous <= 0:
        return 0.0
    change = (current - previous) / previous * 100
    divisor = {TimeFrame.QUARTER: 3, TimeFrame.HALF_YEAR: 6, TimeFrame.YEAR: 12}.get(
        frame, 1
    )
    return change / divisor


@dataclass(frozen=True)
class TrendPoint:
    date: date
    daily_total: float
    cumulative_total: float


def compute_trend_data(items: Iterable[ConvertedExpense]) -> List[TrendPoint]:
    """Chronological daily totals plus running cumulative spend."""
    cumulative = 0.0
    points: List[TrendPoint] = []
    for day, daily in by_day(items).items():
        cumulative += daily
        points.append(
            TrendPoint(date=day, daily_total=daily, cumulative_total=cumulative)
        )
    return points


# ---------------- Period comparison -----------------
@dataclass(frozen=True)
class CategoryTrend:
    category: Category
    amount: float
    previous_amount: float
    change_percentage: float
    share: float
    trend: str


def describe_change(change: float) -> str:
    if change > 20:
        return "Significant increase from last period"
    if change > 0:
        return "Slight increase from last period"
    if change < -20:
        return "Significant decrease from last period"
    if change < 0:
        return "Slight decrease from last period"
    return "Stable spending pattern"


def category_trends(
    current: Sequence[ConvertedExpense], previous: Sequence[ConvertedExpense]
) -> List[CategoryTrend]:
    grand = total(current)
    before = category_totals(previous)
    trends = []
    for row in by_category(current):
        prev = before.get(row.category, 0.0)
        change = safe_ratio(row.total - prev, prev) * 100 if prev > 0 else 0.0
        trends.append(
            CategoryTrend(
                category=row.category,
                amount=row.total,
                previous_amount=prev,
                change_percentage=change,
                share=safe_ratio(row.total, grand),
                trend=describe_change(change),
            )
        )
    return trends


def large_expenses(
    items: Sequence[ConvertedExpense], frame: TimeFrame, now: datetime
) -> List[ConvertedExpense]:
    """Expenses above twice the daily average."""
    avg = daily_average(items, frame, now)
    return [i for i in items if i.amount > avg * 2]


_SAVINGS_RATES: Dict[TimeFrame, tuple] = {
    # frame: (divisor to the base figure, savings rate, scale back to the frame)
    # the week row divides on both sides, giving total * rate / 16
    TimeFrame.WEEK: (4, 0.25, 0.25),
    TimeFrame.MONTH: (1, 0.2, 1),
    TimeFrame.QUARTER: (3, 0.25, 3),
    TimeFrame.HALF_YEAR: (6, 0.3, 6),
    TimeFrame.YEAR: (12, 0.35, 12),
}


def savings_potential(
    items: Sequence[ConvertedExpense], frame: TimeFrame, now: datetime
) -> float:
    """Estimated savings over the frame from discretionary-like spending.

    The frame's discretionary total is reduced to a monthly figure, a
    frame-specific savings rate applied, then adjusted for essential share,
    consistency and the number of large transactions before scaling back.
    """
    discretionary = sum(
        i.amount for i in items if i.category in SAVINGS_CANDIDATE_CATEGORIES
    )
    if discretionary <= 0:
        return 0.0
    divisor, rate, scale = _SAVINGS_RATES.get(frame, _SAVINGS_RATES[TimeFrame.MONTH])
    monthly_potential = discretionary / divisor * rate

    multiplier = 1.0
    essential = essential_percentage(items)
    if essential < 40:
        multiplier *= 1.2
    elif essential > 60:
        multiplier *= 0.8
    if consistency(items) > 0.7:
        multiplier *= 1.1
    if len(large_expenses(items, frame, now)) > len(items) / 10:
        multiplier *= 1.15

    return monthly_potential * multiplier * scale


# ---------------- Summary -----------------
@dataclass(frozen=True)
class PeriodSummary:
    frame: TimeFrame
    currency: str
    total: float
    previous_total: Optional[float]
    change_percentage: float
    transaction_count: int
    active_categories: int
    daily_average: float
    consistency: float
    essential_percentage: float
    discretionary_percentage: float
    savings_potential: float


def compute_period_summary(
    expenses: Sequence[Expense],
    converter: CurrencyConverter,
    currency: str,
    frame: TimeFrame,
    now: datetime,
) -> PeriodSummary:
    current = convert_expenses(filter_window(expenses, window(frame, now)), converter, currency)
    prev_window = previous_window(frame, now)
    current_total = total(current)
    previous_total: Optional[float] = None
    change = 0.0
    if prev_window is not None:
        previous_total = total(
            convert_expenses(filter_window(expenses, prev_window), converter, currency)
        )
        change = spending_change_percentage(current_total, previous_total, frame)
    return PeriodSummary(
        frame=frame,
        currency=currency,
        total=current_total,
        previous_total=previous_total,
        change_percentage=change,
        transaction_count=len(current),
        active_categories=len({i.category for i in current}),
        daily_average=daily_average(current, frame, now),
        consistency=consistency(current),
        essential_percentage=essential_percentage(current),
        discretionary_percentage=discretionary_percentage(current),
        savings_potential=savings_potential(current, frame, now),
    )
