"""Data Access Layer over the SQLite key/value metadata table.

Responsibilities
----------------
- Store and load the three persisted records (expense list, budget settings,
  last known rate table) as JSON blobs under fixed keys.
- Recover from decode or IO failures by logging and returning the empty /
  default state, so a damaged store never prevents start-up.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from expense_tracker.models import BudgetSettings, Expense, RateTable
from expense_tracker.models.constants import (
    BUDGET_SETTINGS_KEY,
    CACHED_RATES_KEY,
    EXPENSES_KEY,
)
from .schema import UPSERT_SQL, connect

logger = logging.getLogger("expense_tracker.db")

_EXPENSE_LIST = TypeAdapter(List[Expense])


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Raw key/value access
    def get_value(self, key: str) -> Optional[str]:
        with closing(connect(self.db_path)) as conn:
            row = conn.execute("SELECT value FROM metadata WHERE key=?", (key,)).fetchone()
            return row["value"] if row else None

    def set_value(self, key: str, value: str) -> None:
        with closing(connect(self.db_path)) as conn, conn:
            conn.execute(UPSERT_SQL, (key, value))

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.get_value(key)
        except sqlite3.Error:
            logger.warning("failed to read %s from store", key, exc_info=True)
            return None

    def _write(self, key: str, value: str) -> bool:
        try:
            self.set_value(key, value)
            return True
        except sqlite3.Error:
            logger.warning("failed to write %s to store", key, exc_info=True)
            return False

    # ------------------------------------------------------------------
    # Expenses
    def load_expenses(self) -> List[Expense]:
        raw = self._read(EXPENSES_KEY)
        if raw is None:
            return []
        try:
            return _EXPENSE_LIST.validate_json(raw)
        except ValidationError:
            logger.warning("stored expenses could not be decoded; starting empty")
            return []

    def save_expenses(self, expenses: List[Expense]) -> bool:
        return self._write(EXPENSES_KEY, _EXPENSE_LIST.dump_json(expenses).decode("utf-8"))

    # ------------------------------------------------------------------
    # Budget settings
    def load_budget_settings(self) -> BudgetSettings:
        raw = self._read(BUDGET_SETTINGS_KEY)
        if raw is None:
            return BudgetSettings.default()
        try:
            return BudgetSettings.model_validate_json(raw)
        except ValidationError:
            logger.warning("stored budget settings could not be decoded; using default")
            return BudgetSettings.default()

    def save_budget_settings(self, settings: BudgetSettings) -> bool:
        return self._write(BUDGET_SETTINGS_KEY, settings.model_dump_json())

    # ------------------------------------------------------------------
    # Cached exchange rates
    def load_rate_table(self) -> RateTable:
        raw = self._read(CACHED_RATES_KEY)
        if raw is None:
            return RateTable.empty()
        try:
            data = json.loads(raw)
            if isinstance(data, dict) and "rates" in data:
                return RateTable.model_validate(data).ensure_complete()
            # Older caches stored the bare {code: rate} mapping
            if isinstance(data, dict) and all(
                isinstance(v, (int, float)) for v in data.values()
            ):
                legacy = RateTable(rates={k: float(v) for k, v in data.items()})
                return legacy.ensure_complete()
        except ValueError:
            pass
        logger.warning("cached rate table could not be decoded or is incomplete; starting empty")
        return RateTable.empty()

    def save_rate_table(self, table: RateTable) -> bool:
        return self._write(CACHED_RATES_KEY, table.model_dump_json())
