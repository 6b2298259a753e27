from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a fixed offline table (useful for development and tests);
'external-http' fetches the latest table from the exchange-rate service.
"""
import logging
from datetime import datetime
from typing import Dict, Optional

from pydantic import ValidationError

from expense_tracker.models import ExchangeRateResponse, RateTable
from expense_tracker.models.constants import BASE_CURRENCY
from expense_tracker.services.http_client import HttpError, get_json
from .base import RateProvider

logger = logging.getLogger("expense_tracker.rates")

# Units per 1 USD; approximate placeholders
_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 151.0,
    "AUD": 1.52,
    "CAD": 1.36,
    "CHF": 0.90,
    "CNY": 7.23,
    "HKD": 7.82,
    "NZD": 1.66,
    "SGD": 1.35,
    "INR": 83.3,
    "MXN": 17.1,
    "BRL": 5.05,
    "KRW": 1350.0,
    "SEK": 10.6,
}


class StaticRateProvider(RateProvider):
    def fetch(self) -> Optional[RateTable]:  # type: ignore[override]
        return RateTable.from_response(
            ExchangeRateResponse(base=BASE_CURRENCY, rates=_STATIC_RATES),
            fetched_at=datetime.now(),
        )


class ExternalHTTPRateProvider(RateProvider):
    """One GET to `{base_url}/{base}` returning {"base": ..., "rates": {...}}."""

    def __init__(
        self,
        base_url: str = "https://api.exchangerate-api.com/v4/latest",
        timeout: float = 5.0,
        retries: int = 2,
        base_currency: str = BASE_CURRENCY,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.base_currency = base_currency

    @property
    def url(self) -> str:
        return f"{self.base_url}/{self.base_currency}"

    def fetch(self) -> Optional[RateTable]:  # type: ignore[override]
        try:
            data = get_json(self.url, timeout=self.timeout, retries=self.retries)
        except HttpError as e:
            logger.warning("exchange rate fetch failed: %s", e)
            return None
        try:
            payload = ExchangeRateResponse.model_validate(data)
            return RateTable.from_response(payload, fetched_at=datetime.now())
        except (ValidationError, ValueError) as e:
            logger.warning("exchange rate payload rejected: %s", e)
            return None


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "external-http": ExternalHTTPRateProvider,
}


def make_rate_provider(kind: str, **kwargs) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is StaticRateProvider:
        return cls()
    return cls(**kwargs)
