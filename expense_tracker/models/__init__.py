"""Pydantic domain models for the expense tracker."""

from .constants import (
    BASE_CURRENCY,
    CURRENCIES,
    SUPPORTED_CURRENCIES,
)  # re-export
from .category import Category, CategoryGroup
from .expense import Expense, ExpenseIn, ExpenseOut
from .budget import BudgetSettings, BudgetStatus
from .rates import ExchangeRateResponse, RateTable
from .timeframe import TimeFrame, TimeWindow

__all__ = [
    "BASE_CURRENCY",
    "CURRENCIES",
    "SUPPORTED_CURRENCIES",
    "Category",
    "CategoryGroup",
    "Expense",
    "ExpenseIn",
    "ExpenseOut",
    "BudgetSettings",
    "BudgetStatus",
    "ExchangeRateResponse",
    "RateTable",
    "TimeFrame",
    "TimeWindow",
]
