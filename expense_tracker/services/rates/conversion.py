from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from expense_tracker.models import RateTable
from expense_tracker.models.constants import normalize_currency

if TYPE_CHECKING:  # pragma: no cover
    from expense_tracker.models import Expense

"""Currency conversion over a RateTable snapshot.

Responsibilities:
    - Strict conversion (`convert`) that reports missing rates with None.
    - Policy conversions (`converted_amount`, `convert_amount`) that never
      fail: while the table is empty the original amount is returned as a
      known approximation, and unknown codes count as rate 1.0.

Both rates are relative to the same base, so the ratio rate[to] / rate[from]
does not depend on which base the table uses.
"""


@dataclass(frozen=True)
class ConversionResult:
    amount: float
    from_currency: str
    to_currency: str
    rate: Optional[float]
    converted: Optional[float]


class CurrencyConverter:
    def __init__(self, table: RateTable | None = None):
        self._table = table if table is not None else RateTable.empty()

    @property
    def table(self) -> RateTable:
        return self._table

    def rates_ready(self) -> bool:
        return not self._table.is_empty

    def convert(self, amount: float, from_currency: str, to_currency: str) -> Optional[float]:
        source = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        if source == target:
            return amount
        source_rate = self._table.get(source)
        target_rate = self._table.get(target)
        if source_rate is None or target_rate is None or source_rate == 0:
            return None
        return amount * (target_rate / source_rate)

    def convert_amount(self, amount: float, from_currency: str, to_currency: str) -> float:
        if normalize_currency(from_currency) == normalize_currency(to_currency):
            return amount
        if not self.rates_ready():
            return amount
        converted = self.convert(amount, from_currency, to_currency)
        return amount if converted is None else converted

    def converted_amount(self, expense: "Expense", to_currency: str) -> float:
        if expense.currency == normalize_currency(to_currency):
            return expense.amount
        if not self.rates_ready():
            return expense.amount
        base_rate = self._table.rate_for(expense.currency)
        target_rate = self._table.rate_for(to_currency)
        return expense.amount * (target_rate / base_rate)

    def explain(self, amount: float, from_currency: str, to_currency: str) -> ConversionResult:
        source = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
        converted = self.convert(amount, source, target)
        rate = None if converted is None else self.convert(1.0, source, target)
        return ConversionResult(
            amount=amount,
            from_currency=source,
            to_currency=target,
            rate=rate,
            converted=converted,
        )
