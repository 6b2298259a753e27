"""Budget utility helpers.

Turns the stored monthly budget into the figures the dashboard shows: this
month's spend, remaining amount, progress and threshold flags (80% / 90%).
The budget is converted into the requested display currency with the same
fallback policy as expense amounts.
"""

from __future__ import annotations
from datetime import datetime
from typing import Iterable

from expense_tracker.models import BudgetSettings, BudgetStatus, Expense, TimeFrame
from expense_tracker.services.analytics_utils import convert_expenses, total
from expense_tracker.services.rates.conversion import CurrencyConverter
from expense_tracker.services.timeframes import filter_expenses

DEFAULT_WARN_PCT = 80
DEFAULT_DANGER_PCT = 90


def converted_budget(
    budget: BudgetSettings, converter: CurrencyConverter, currency: str, months: float = 1
) -> float:
    return converter.convert_amount(budget.monthly_budget * months, budget.currency, currency)


def current_month_total(
    expenses: Iterable[Expense], converter: CurrencyConverter, currency: str, now: datetime
) -> float:
    month = filter_expenses(expenses, TimeFrame.MONTH, now)
    return total(convert_expenses(month, converter, currency))


def remaining_budget(
    expenses: Iterable[Expense],
    budget: BudgetSettings,
    converter: CurrencyConverter,
    currency: str,
    now: datetime,
) -> float:
    """Converted monthly budget minus this month's spend; negative when over."""
    return converted_budget(budget, converter, currency) - current_month_total(
        expenses, converter, currency, now
    )


def budget_progress(
    expenses: Iterable[Expense],
    budget: BudgetSettings,
    converter: CurrencyConverter,
    currency: str,
    now: datetime,
) -> float:
    """Fraction of the monthly budget used, capped at 1.0; 0 without a budget."""
    limit = converted_budget(budget, converter, currency)
    if limit <= 0:
        return 0.0
    return min(current_month_total(expenses, converter, currency, now) / limit, 1.0)


def budget_status(
    expenses: Iterable[Expense],
    budget: BudgetSettings,
    converter: CurrencyConverter,
    currency: str,
    now: datetime,
    warn_pct: int = DEFAULT_WARN_PCT,
    danger_pct: int = DEFAULT_DANGER_PCT,
) -> BudgetStatus:
    expenses = list(expenses)
    limit = converted_budget(budget, converter, currency)
    spent = current_month_total(expenses, converter, currency, now)
    percent_used = (spent / limit) * 100 if limit > 0 else 0.0
    return BudgetStatus(
        display_currency=currency,
        monthly_budget=limit,
        spent_amount=spent,
        remaining=limit - spent,
        progress=min(spent / limit, 1.0) if limit > 0 else 0.0,
        percent_used=percent_used,
        warn=percent_used >= warn_pct if limit > 0 else False,
        danger=percent_used >= danger_pct if limit > 0 else False,
        warn_threshold=warn_pct,
        danger_threshold=danger_pct,
    )
