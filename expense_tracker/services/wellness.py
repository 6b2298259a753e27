"""Financial wellness score.

The score starts from a piecewise-linear curve over the spending ratio
(spend / budget for the period), then applies trend, essential-share and
consistency penalties plus a small frame-specific bonus, and is clamped to
[10, 100]. Descriptions are banded at 90 / 70 / 50 / 30 with wording that
depends on the time frame.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from expense_tracker.models import BudgetSettings, Expense, TimeFrame
from expense_tracker.models.timeframe import SCORING_FRAMES
from expense_tracker.services.analytics_utils import (
    ConvertedExpense,
    consistency,
    convert_expenses,
    essential_percentage,
    monthly_totals,
    quarterly_totals,
    total,
    variance,
)
from expense_tracker.services.budget_utils import converted_budget
from expense_tracker.services.rates.conversion import CurrencyConverter
from expense_tracker.services.timeframes import filter_expenses, months_in_period

logger = logging.getLogger("expense_tracker.wellness")

MIN_SCORE = 10.0
MAX_SCORE = 100.0

# (spending ratio, score) knots; linear in between, flat beyond the last one
_BASE_SCORE_KNOTS: List[Tuple[float, float]] = [
    (0.00, 100.0),
    (0.85, 90.0),
    (0.86, 89.0),
    (0.95, 80.0),
    (0.96, 79.0),
    (1.00, 70.0),
    (1.01, 69.0),
    (1.10, 50.0),
    (1.11, 49.0),
    (1.20, 30.0),
    (1.21, 29.0),
    (1.50, 15.0),
    (1.51, 14.0),
    (1.55, 10.0),
]
_KNOT_RATIOS = [r for r, _ in _BASE_SCORE_KNOTS]

TIME_PERIOD_MULTIPLIER: Dict[TimeFrame, float] = {
    TimeFrame.WEEK: 0.8,
    TimeFrame.MONTH: 1.0,
    TimeFrame.QUARTER: 1.2,
    TimeFrame.HALF_YEAR: 1.3,
    TimeFrame.YEAR: 1.5,
}

# frame: (months inspected, points per unit of improvement)
_TREND_BONUS: Dict[TimeFrame, Tuple[int, float]] = {
    TimeFrame.QUARTER: (3, 5.0),
    TimeFrame.HALF_YEAR: (6, 8.0),
    TimeFrame.YEAR: (12, 10.0),
}

WEEK_BONUS = 5.0


def base_score(spending_ratio: float) -> float:
    """Score for a spending ratio: 100 at zero spend, 70 at budget, 10 floor."""
    ratio = max(0.0, spending_ratio)
    if ratio >= _KNOT_RATIOS[-1]:
        return _BASE_SCORE_KNOTS[-1][1]
    idx = bisect.bisect_right(_KNOT_RATIOS, ratio)
    r0, s0 = _BASE_SCORE_KNOTS[idx - 1]
    r1, s1 = _BASE_SCORE_KNOTS[idx]
    return s0 + (ratio - r0) / (r1 - r0) * (s1 - s0)


def spending_ratio(total_spending: float, period_budget: float) -> float:
    if period_budget <= 0:
        return 1.0
    return total_spending / period_budget


def improvement_fraction(monthly: Sequence[float]) -> Optional[float]:
    """Share of month-over-month steps (oldest first) where spending did not rise."""
    if len(monthly) < 2:
        return None
    steps = sum(1 for i in range(1, len(monthly)) if monthly[i] <= monthly[i - 1])
    return steps / (len(monthly) - 1)


def trend_penalty(
    items: Sequence[ConvertedExpense],
    frame: TimeFrame,
    monthly_budget: float,
    now: datetime,
) -> float:
    """Penalty for unstable or over-budget history; `monthly_budget` is in display currency."""
    if frame is TimeFrame.QUARTER:
        return min(15.0, variance(monthly_totals(items, 3, now)) * 0.5)
    if frame is TimeFrame.HALF_YEAR:
        over = [t for t in monthly_totals(items, 6, now) if t > monthly_budget]
        return len(over) * 3.0
    if frame is TimeFrame.YEAR:
        return min(20.0, variance(quarterly_totals(items, now)) * 0.75)
    return 0.0


def essential_penalty(essential_ratio: float, frame: TimeFrame) -> float:
    if essential_ratio <= 0.7:
        return 0.0
    return min(20.0, (essential_ratio - 0.7) * 100) * TIME_PERIOD_MULTIPLIER[frame]


def consistency_penalty(consistency_value: float, frame: TimeFrame) -> float:
    if consistency_value >= 0.5:
        return 0.0
    return min(10.0, (0.5 - consistency_value) * 50) * TIME_PERIOD_MULTIPLIER[frame]


def time_frame_bonus(
    items: Sequence[ConvertedExpense], frame: TimeFrame, now: datetime
) -> float:
    if frame is TimeFrame.WEEK:
        return WEEK_BONUS
    if frame not in _TREND_BONUS:
        return 0.0
    months, points = _TREND_BONUS[frame]
    fraction = improvement_fraction(monthly_totals(items, months, now))
    return 0.0 if fraction is None else fraction * points


@dataclass(frozen=True)
class WellnessBreakdown:
    frame: TimeFrame
    currency: str
    total_spending: float
    period_budget: float
    spending_ratio: float
    base_score: float
    trend_penalty: float
    essential_penalty: float
    consistency_penalty: float
    bonus: float
    score: float


def compute_wellness(
    expenses: Sequence[Expense],
    budget: BudgetSettings,
    frame: TimeFrame,
    converter: CurrencyConverter,
    currency: str,
    now: datetime,
) -> WellnessBreakdown:
    if frame not in SCORING_FRAMES:
        raise ValueError(f"time frame '{frame.value}' cannot be scored")
    items = convert_expenses(filter_expenses(expenses, frame, now), converter, currency)
    spent = total(items)
    period_budget = converted_budget(budget, converter, currency, months_in_period(frame))
    ratio = spending_ratio(spent, period_budget)

    base = base_score(ratio)
    trend = trend_penalty(items, frame, converted_budget(budget, converter, currency), now)
    essential = essential_penalty(essential_percentage(items) / 100, frame)
    steady = consistency_penalty(consistency(items), frame)
    bonus = time_frame_bonus(items, frame, now)

    score = max(MIN_SCORE, min(MAX_SCORE, base - trend - essential - steady + bonus))
    logger.debug(
        "wellness %s: ratio=%.3f base=%.1f trend=%.1f essential=%.1f consistency=%.1f bonus=%.1f",
        frame.value,
        ratio,
        base,
        trend,
        essential,
        steady,
        bonus,
    )
    return WellnessBreakdown(
        frame=frame,
        currency=currency,
        total_spending=spent,
        period_budget=period_budget,
        spending_ratio=ratio,
        base_score=base,
        trend_penalty=trend,
        essential_penalty=essential,
        consistency_penalty=steady,
        bonus=bonus,
        score=score,
    )


def score(
    expenses: Sequence[Expense],
    budget: BudgetSettings,
    frame: TimeFrame,
    converter: CurrencyConverter,
    currency: str,
    now: datetime,
) -> float:
    return compute_wellness(expenses, budget, frame, converter, currency, now).score


# ---------------- Descriptions -----------------
@dataclass(frozen=True)
class WellnessDescription:
    tier: str
    title: str
    description: str
    color: str
    icon: str


_TIERS = (
    (90.0, "Excellent", "green", "star.circle.fill"),
    (70.0, "Good", "blue", "checkmark.circle.fill"),
    (50.0, "Fair", "yellow", "exclamationmark.circle.fill"),
    (30.0, "Warning", "orange", "exclamationmark.triangle.fill"),
    (float("-inf"), "Critical", "red", "xmark.circle.fill"),
)

_DESCRIPTIONS: Dict[TimeFrame, Tuple[str, str, str, str, str]] = {
    TimeFrame.WEEK: (
        "Great weekly budget control! Keep maintaining these spending habits.",
        "Solid weekly spending. Minor adjustments could improve your score.",
        "Consider reviewing this week's expenses and plan for next week.",
        "This week's spending needs attention. Try to reduce non-essential expenses.",
        "Immediate action needed. Review and cut back on spending.",
    ),
    TimeFrame.MONTH: (
        "Outstanding monthly financial management! Your budget control is exemplary.",
        "Your monthly spending is well-managed with room for minor optimization.",
        "Monthly spending needs attention. Review your budget allocations.",
        "Your monthly expenses are high. Consider creating a stricter budget.",
        "Monthly spending is significantly high. Immediate budget revision needed.",
    ),
    TimeFrame.QUARTER: (
        "Outstanding 3-month trend! Your long-term financial planning is working well.",
        "Consistent quarterly performance. Focus on maintaining stable spending patterns.",
        "Your quarterly trend shows some volatility. Consider setting quarterly budget goals.",
        "Quarterly spending patterns need attention. Look for recurring overspending areas.",
        "3-month trend shows consistent overspending. Time for a major financial review.",
    ),
    TimeFrame.HALF_YEAR: (
        "Exceptional 6-month financial management! Your long-term strategy is working perfectly.",
        "Strong 6-month performance. Your financial habits are building good momentum.",
        "Your 6-month trend needs attention. Consider reviewing your financial goals.",
        "Half-yearly spending patterns show concerning trends. Time for strategic changes.",
        "6-month performance indicates serious financial stress. Consider professional advice.",
    ),
    TimeFrame.YEAR: (
        "Outstanding yearly financial management! You've maintained exceptional control over long-term spending.",
        "Strong yearly performance. Your financial habits show consistent discipline.",
        "Annual review suggests need for improvement. Consider long-term financial planning.",
        "Yearly trends show persistent issues. Time for a comprehensive financial overhaul.",
        "Annual performance indicates severe financial stress. Seek professional financial advice.",
    ),
}


def describe(score_value: float, frame: TimeFrame) -> WellnessDescription:
    if frame not in _DESCRIPTIONS:
        raise ValueError(f"time frame '{frame.value}' cannot be scored")
    # anything below every threshold (NaN included) is the last tier
    index = next(
        (i for i, tier_row in enumerate(_TIERS) if score_value >= tier_row[0]),
        len(_TIERS) - 1,
    )
    _, tier, color, icon = _TIERS[index]
    return WellnessDescription(
        tier=tier,
        title=tier,
        description=_DESCRIPTIONS[frame][index],
        color=color,
        icon=icon,
    )
