from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from itertools import combinations
from typing import Callable, List, Optional, Sequence, Tuple

from expense_tracker.models import Category, Expense, TimeFrame
from expense_tracker.services.analytics_utils import (
    ConvertedExpense,
    by_category,
    by_weekday,
    convert_expenses,
    daily_average,
    essential_percentage,
    total,
)
from expense_tracker.services.money import format_money
from expense_tracker.services.rates.conversion import CurrencyConverter
from expense_tracker.services.timeframes import (
    filter_expenses,
    filter_window,
    period_length_days,
    previous_window,
    window,
)

"""Spending patterns and savings recommendations.

Patterns describe what the data looks like; recommendations pair a trigger
with an estimated saving in the display currency. Every detector is
independent and yields nothing on an empty set, so a sparse period simply
produces a shorter list.
"""

logger = logging.getLogger("expense_tracker.insights")

# (label, start hour inclusive, end hour exclusive); night wraps midnight
TIME_OF_DAY_BUCKETS: Tuple[Tuple[str, int, int], ...] = (
    ("Morning (5AM-12PM)", 5, 12),
    ("Afternoon (12PM-5PM)", 12, 17),
    ("Evening (5PM-10PM)", 17, 22),
    ("Night (10PM-5AM)", 22, 5),
)

WEEKEND_DAYS = (5, 6)


@dataclass(frozen=True)
class SpendingPattern:
    title: str
    description: str
    icon: str
    color: str


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    icon: str
    color: str
    potential_saving: Optional[float] = None


def time_of_day(hour: int) -> str:
    for label, start, end in TIME_OF_DAY_BUCKETS:
        if start < end and start <= hour < end:
            return label
    return TIME_OF_DAY_BUCKETS[-1][0]


def is_late_night(moment: datetime) -> bool:
    return moment.hour >= 22 or moment.hour < 5


# ---------------- Patterns -----------------
def largest_transaction(
    items: Sequence[ConvertedExpense], currency: str
) -> Optional[SpendingPattern]:
    if not items:
        return None
    top = max(items, key=lambda i: i.amount)
    return SpendingPattern(
        title="Largest Transaction",
        description=(
            f"Your highest expense was {format_money(top.amount, currency)} for "
            f"{top.category.value} on {top.date:%b %d, %Y}"
        ),
        icon="arrow.up.circle",
        color="red",
    )


def peak_spending_time(items: Sequence[ConvertedExpense]) -> Optional[SpendingPattern]:
    """Busiest part of the day by transaction count; ties go to the earlier bucket."""
    if not items:
        return None
    counts = Counter(time_of_day(i.date.hour) for i in items)
    label = max((b[0] for b in TIME_OF_DAY_BUCKETS), key=lambda name: counts[name])
    return SpendingPattern(
        title="Peak Spending Time",
        description=f"You make most of your purchases during {label} ({counts[label]} transactions)",
        icon="clock",
        color="blue",
    )


def spending_frequency(
    items: Sequence[ConvertedExpense], frame: TimeFrame
) -> Optional[SpendingPattern]:
    if not items:
        return None
    days = period_length_days(frame)
    active_days = len({i.date.date() for i in items})
    frequency = active_days / days * 100
    return SpendingPattern(
        title="Spending Frequency",
        description=(
            f"You make purchases on {int(frequency)}% of days, averaging "
            f"{len(items) / days:.1f} transactions per day"
        ),
        icon="calendar.badge.clock",
        color="indigo",
    )


def category_pairs(items: Sequence[ConvertedExpense]) -> List[Tuple[Tuple[Category, Category], int]]:
    """Same-day category pairs ranked by the number of days they co-occur."""
    days = {}
    for i in items:
        days.setdefault(i.date.date(), set()).add(i.category)
    counts: Counter = Counter()
    for cats in days.values():
        ordered = sorted(cats, key=lambda c: c.value)
        counts.update(combinations(ordered, 2))
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0][0].value, kv[0][1].value))


def common_combination(items: Sequence[ConvertedExpense]) -> Optional[SpendingPattern]:
    pairs = category_pairs(items)
    if not pairs:
        return None
    (first, second), _ = pairs[0]
    return SpendingPattern(
        title="Common Combinations",
        description=f"You often combine {first.value} with {second.value} purchases on the same day",
        icon="arrow.triangle.branch",
        color="green",
    )


def transaction_size(
    items: Sequence[ConvertedExpense], currency: str
) -> Optional[SpendingPattern]:
    if not items:
        return None
    average = total(items) / len(items)
    return SpendingPattern(
        title="Transaction Size",
        description=f"Your average transaction is {format_money(average, currency)}",
        icon="creditcard",
        color="orange",
    )


def weekly_peak(items: Sequence[ConvertedExpense]) -> Optional[SpendingPattern]:
    days = by_weekday(items)
    if not days:
        return None
    peak = max(days, key=lambda d: d.average)
    return SpendingPattern(
        title="Weekly Peak",
        description=f"Your spending tends to peak on {peak.weekday}s. Consider planning ahead for these days.",
        icon="calendar",
        color="purple",
    )


def longest_spending_streak(items: Sequence[ConvertedExpense]) -> int:
    """Longest run of consecutive calendar days with at least one expense."""
    days: List[date] = sorted({i.date.date() for i in items})
    if not days:
        return 0
    best = current = 1
    for prev, day in zip(days, days[1:]):
        current = current + 1 if day - prev == timedelta(days=1) else 1
        best = max(best, current)
    return best


def spending_streak(items: Sequence[ConvertedExpense]) -> Optional[SpendingPattern]:
    streak = longest_spending_streak(items)
    if streak < 2:
        return None
    return SpendingPattern(
        title="Spending Streak",
        description=f"Your longest run of spending was {streak} consecutive days",
        icon="flame",
        color="orange",
    )


def monthly_trend(
    expenses: Sequence[Expense], converter: CurrencyConverter, currency: str, now: datetime
) -> Optional[SpendingPattern]:
    """This calendar month against the previous one, over the whole store."""
    current = total(
        convert_expenses(filter_expenses(expenses, TimeFrame.MONTH, now), converter, currency)
    )
    previous = total(
        convert_expenses(
            filter_window(expenses, previous_window(TimeFrame.MONTH, now)), converter, currency
        )
    )
    if previous > 0:
        change = (current - previous) / previous * 100
        direction = "increased" if change >= 0 else "decreased"
        return SpendingPattern(
            title="Monthly Trend",
            description=f"Your spending has {direction} by {abs(change):.1f}% compared to last month",
            icon="arrow.up.right" if change >= 0 else "arrow.down.right",
            color="red" if change >= 0 else "green",
        )
    if current > 0:
        return SpendingPattern(
            title="Monthly Trend",
            description="First month of tracking expenses",
            icon="star.fill",
            color="blue",
        )
    return None


def identify_patterns(
    expenses: Sequence[Expense],
    converter: CurrencyConverter,
    currency: str,
    frame: TimeFrame,
    now: datetime,
) -> List[SpendingPattern]:
    items = convert_expenses(filter_window(expenses, window(frame, now)), converter, currency)
    detectors: List[Callable[[], Optional[SpendingPattern]]] = [
        lambda: largest_transaction(items, currency),
        lambda: peak_spending_time(items),
        lambda: spending_frequency(items, frame),
        lambda: common_combination(items),
        lambda: transaction_size(items, currency),
        lambda: weekly_peak(items),
        lambda: spending_streak(items),
        lambda: monthly_trend(expenses, converter, currency, now),
    ]
    patterns = [p for p in (detect() for detect in detectors) if p is not None]
    logger.debug("patterns %s/%s: %d found", frame.value, currency, len(patterns))
    return patterns


# ---------------- Recommendations -----------------
def _sum_where(items: Sequence[ConvertedExpense], predicate) -> float:
    return sum(i.amount for i in items if predicate(i))


def generate_recommendations(
    expenses: Sequence[Expense],
    converter: CurrencyConverter,
    currency: str,
    frame: TimeFrame,
    now: datetime,
) -> List[Recommendation]:
    items = convert_expenses(filter_window(expenses, window(frame, now)), converter, currency)
    if not items:
        return []
    grand = total(items)
    recs: List[Recommendation] = []

    top = by_category(items)[0]
    # assumes three months of history for the category average
    monthly_average = top.total / 3
    recs.append(
        Recommendation(
            title=f"Optimize {top.category.value} Spending",
            description=(
                f"Set a monthly budget of {format_money(monthly_average * 0.8, currency)} "
                f"for {top.category.value} to reduce spending by 20%."
            ),
            icon="chart.pie",
            color="purple",
            potential_saving=monthly_average * 0.2,
        )
    )

    weekend_total = _sum_where(items, lambda i: i.date.weekday() in WEEKEND_DAYS)
    if weekend_total > grand * 0.4:
        recs.append(
            Recommendation(
                title="Weekend Budget Plan",
                description=(
                    "Your weekend spending is high. Try setting a specific weekend budget "
                    "and planning activities in advance."
                ),
                icon="calendar.badge.clock",
                color="orange",
                potential_saving=weekend_total * 0.3,
            )
        )

    subscriptions = _sum_where(items, lambda i: i.category is Category.SUBSCRIPTION)
    if subscriptions > grand * 0.1:
        recs.append(
            Recommendation(
                title="Review Subscriptions",
                description=(
                    f"Your subscription costs are {format_money(subscriptions, currency)} "
                    "per month. Consider reviewing unused services."
                ),
                icon="repeat.circle",
                color="blue",
                potential_saving=subscriptions * 0.25,
            )
        )

    dining = _sum_where(items, lambda i: i.category is Category.DINING)
    groceries = _sum_where(items, lambda i: i.category is Category.GROCERIES)
    if dining > groceries * 1.5:
        recs.append(
            Recommendation(
                title="Balance Food Expenses",
                description=(
                    "You spend significantly more on dining out than groceries. "
                    "Consider meal planning to save."
                ),
                icon="fork.knife",
                color="green",
                potential_saving=dining * 0.3,
            )
        )

    late_night = [i for i in items if is_late_night(i.date)]
    if late_night:
        recs.append(
            Recommendation(
                title="Late Night Spending",
                description=(
                    "You have significant late-night purchases. Consider setting a cutoff "
                    "time for non-essential spending."
                ),
                icon="moon.stars",
                color="indigo",
                potential_saving=total(late_night) * 0.5,
            )
        )

    threshold = daily_average(items, frame, now) * 0.1
    small = [
        i for i in items if i.amount < threshold and i.category is not Category.GROCERIES
    ]
    if len(small) > len(items) / 4:
        recs.append(
            Recommendation(
                title="Reduce Impulse Buys",
                description=(
                    "You have many small purchases. Try the 24-hour rule before making "
                    "non-essential purchases."
                ),
                icon="cart.badge.minus",
                color="red",
                potential_saving=total(small) * 0.6,
            )
        )

    essential = essential_percentage(items)
    if essential < 50:
        discretionary = grand * (1 - essential / 100)
        saving = discretionary * 0.2
        recs.append(
            Recommendation(
                title="Savings Opportunity",
                description=(
                    "Your essential expenses are low. Consider automating "
                    f"{format_money(saving, currency)} of discretionary spending into savings."
                ),
                icon="leaf.arrow.circlepath",
                color="green",
                potential_saving=saving,
            )
        )

    logger.debug("recommendations %s/%s: %d", frame.value, currency, len(recs))
    return recs
