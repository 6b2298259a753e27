from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import BASE_CURRENCY, SUPPORTED_CURRENCIES, normalize_currency


class ExchangeRateResponse(BaseModel):
    """Payload of the exchange-rate service: rates per 1 unit of `base`."""

    base: str
    rates: Dict[str, float]

    @field_validator("base")
    @classmethod
    def upper_base(cls, v: str) -> str:
        return normalize_currency(v)


class RateTable(BaseModel):
    """Exchange rates relative to a single base currency.

    Either empty (rates not loaded yet) or holding the base at 1.0 plus every
    supported currency. Tables are replaced wholesale, never merged.
    """

    model_config = ConfigDict(frozen=True)

    base: str = BASE_CURRENCY
    rates: Dict[str, float] = Field(default_factory=dict)
    fetched_at: Optional[datetime] = None

    @classmethod
    def empty(cls, base: str = BASE_CURRENCY) -> "RateTable":
        return cls(base=base)

    @classmethod
    def from_response(
        cls,
        payload: ExchangeRateResponse,
        required: Iterable[str] = SUPPORTED_CURRENCIES,
        fetched_at: Optional[datetime] = None,
    ) -> "RateTable":
        """Build a table from a service payload.

        Raises ValueError if a required code is missing or a rate is not
        positive, so a partial payload never replaces a good table.
        """
        rates: Dict[str, float] = {
            normalize_currency(code): float(rate) for code, rate in payload.rates.items()
        }
        rates[payload.base] = 1.0
        _check_complete(rates, required)
        return cls(base=payload.base, rates=rates, fetched_at=fetched_at)

    def ensure_complete(self, required: Iterable[str] = SUPPORTED_CURRENCIES) -> "RateTable":
        """Return the table unchanged if it is empty or complete.

        Used for tables that did not come through `from_response`, such as a
        cached copy read back from storage.
        """
        if self.is_empty:
            return self
        if self.rates.get(self.base) != 1.0:
            raise ValueError(f"base {self.base} is not at 1.0")
        _check_complete(self.rates, required)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.rates

    def get(self, currency: str) -> Optional[float]:
        return self.rates.get(normalize_currency(currency))

    def rate_for(self, currency: str) -> float:
        """Lenient lookup: unknown codes and zero rates count as 1.0."""
        rate = self.rates.get(normalize_currency(currency))
        if not rate:
            return 1.0
        return rate


def _check_complete(rates: Dict[str, float], required: Iterable[str]) -> None:
    missing = [code for code in required if code not in rates]
    if missing:
        raise ValueError(f"rate table missing currencies: {', '.join(missing)}")
    bad = [code for code, rate in rates.items() if not math.isfinite(rate) or rate <= 0]
    if bad:
        raise ValueError(f"invalid rates for: {', '.join(sorted(bad))}")
