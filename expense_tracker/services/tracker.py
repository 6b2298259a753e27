from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from expense_tracker.db.dal import Database
from expense_tracker.models import BudgetSettings, BudgetStatus, Expense, TimeFrame
from expense_tracker.services import budget_utils
from expense_tracker.services.expense_store import ExpenseStore
from expense_tracker.services.rates.cache_service import RateCacheService
from expense_tracker.services.rates.conversion import CurrencyConverter
from expense_tracker.services.timeframes import filter_expenses

"""Tracker service.

Purpose:
    Single owner of the mutable state behind the API: the expense store,
    the budget settings and the rate cache. Every mutation is written through
    to the database; reads hand out snapshots so analytics work on a stable
    copy.

Start-up:
    `load()` restores expenses, budget and the last cached rate table. A
    damaged record falls back to its empty/default value (logged by the DAL).
"""

logger = logging.getLogger("expense_tracker.tracker")


class TrackerService:
    def __init__(self, db: Database, rates: RateCacheService):
        self._db = db
        self._rates = rates
        self._lock = threading.Lock()
        self._store = ExpenseStore(on_change=self._persist_expenses)
        self._budget = BudgetSettings.default()

    # Persistence ----------------------------------------------
    def _persist_expenses(self, expenses: List[Expense]) -> None:
        if not self._db.save_expenses(expenses):
            logger.warning("failed to persist %d expenses", len(expenses))

    def load(self) -> None:
        expenses = self._db.load_expenses()
        with self._lock:
            self._store = ExpenseStore(expenses, on_change=self._persist_expenses)
            self._budget = self._db.load_budget_settings()
        self._rates.load_cached()
        logger.info(
            "tracker state loaded: %d expenses, budget %.2f %s, rates ready=%s",
            len(expenses),
            self._budget.monthly_budget,
            self._budget.currency,
            self._rates.rates_ready(),
        )

    # Expenses --------------------------------------------------
    def add_expense(self, expense: Expense) -> Expense:
        with self._lock:
            return self._store.add(expense)

    def delete_expense(self, expense_id: UUID) -> bool:
        with self._lock:
            return self._store.remove(expense_id)

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        return self._store.get(expense_id)

    def expenses(self) -> List[Expense]:
        return self._store.snapshot()

    def list_expenses(
        self, frame: TimeFrame = TimeFrame.ALL, now: Optional[datetime] = None
    ) -> List[Expense]:
        return filter_expenses(self._store.snapshot(), frame, now or datetime.now())

    # Budget ----------------------------------------------------
    @property
    def budget(self) -> BudgetSettings:
        return self._budget

    def set_budget(self, settings: BudgetSettings) -> BudgetSettings:
        with self._lock:
            self._budget = settings
        if not self._db.save_budget_settings(settings):
            logger.warning("failed to persist budget settings")
        return settings

    def budget_status(self, currency: str, now: Optional[datetime] = None) -> BudgetStatus:
        return budget_utils.budget_status(
            self.expenses(), self._budget, self.converter(), currency, now or datetime.now()
        )

    # Rates -----------------------------------------------------
    @property
    def rates(self) -> RateCacheService:
        return self._rates

    def rates_ready(self) -> bool:
        return self._rates.rates_ready()

    def converter(self) -> CurrencyConverter:
        return self._rates.converter()

    def converted_amount(self, expense: Expense, currency: str) -> float:
        return self.converter().converted_amount(expense, currency)
