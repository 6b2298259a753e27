from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from expense_tracker.core.config import Settings
from expense_tracker.db.dal import Database
from expense_tracker.db.migrate import apply_migrations
from expense_tracker.main import create_app
from expense_tracker.models import Category, Expense, RateTable
from expense_tracker.services.rates.base import RateProvider
from expense_tracker.services.rates.conversion import CurrencyConverter

# Fixed reference instant: Friday 15 March 2024, 12:00
NOW = datetime(2024, 3, 15, 12, 0)

FULL_RATES = {
    "USD": 1.0,
    "EUR": 0.9,
    "GBP": 0.8,
    "JPY": 150.0,
    "AUD": 1.5,
    "CAD": 1.35,
    "CHF": 0.88,
    "CNY": 7.2,
    "HKD": 7.8,
    "NZD": 1.65,
    "SGD": 1.34,
    "INR": 83.0,
    "MXN": 17.0,
    "BRL": 5.0,
    "KRW": 1300.0,
    "SEK": 10.5,
}


def make_expense(
    amount: float,
    category: Category = Category.GROCERIES,
    date: Optional[datetime] = None,
    currency: str = "USD",
    note: str = "",
) -> Expense:
    return Expense(
        amount=amount,
        category=category,
        date=date or NOW,
        currency=currency,
        note=note,
    )


def make_table(rates=None, fetched_at: Optional[datetime] = None) -> RateTable:
    rates = FULL_RATES if rates is None else rates
    return RateTable(base="USD", rates=dict(rates), fetched_at=fetched_at)


class FakeRateProvider(RateProvider):
    """Returns queued tables in order; None simulates a failed fetch."""

    def __init__(self, *tables: Optional[RateTable]):
        self.tables = list(tables)
        self.calls = 0

    def fetch(self) -> Optional[RateTable]:
        self.calls += 1
        if not self.tables:
            return None
        return self.tables.pop(0)


@pytest.fixture
def converter() -> CurrencyConverter:
    return CurrencyConverter(make_table())


@pytest.fixture
def db(tmp_path) -> Database:
    path = tmp_path / "test.sqlite3"
    apply_migrations(path)
    return Database(path)


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(data_dir=tmp_path, db_filename="api.sqlite3", debug=False)
    s.init_post_load()
    return s


@pytest.fixture
def client(settings):
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c
