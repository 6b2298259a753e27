"""Domain constants used for validation.

The supported currency list is ordered the way pickers present it; use
`CURRENCIES` for membership checks.
"""

from typing import FrozenSet, Tuple

BASE_CURRENCY = "USD"

SUPPORTED_CURRENCIES: Tuple[str, ...] = (
    "USD",  # US Dollar
    "EUR",  # Euro
    "GBP",  # British Pound
    "JPY",  # Japanese Yen
    "AUD",  # Australian Dollar
    "CAD",  # Canadian Dollar
    "CHF",  # Swiss Franc
    "CNY",  # Chinese Yuan
    "HKD",  # Hong Kong Dollar
    "NZD",  # New Zealand Dollar
    "SGD",  # Singapore Dollar
    "INR",  # Indian Rupee
    "MXN",  # Mexican Peso
    "BRL",  # Brazilian Real
    "KRW",  # South Korean Won
    "SEK",  # Swedish Krona
)

CURRENCIES: FrozenSet[str] = frozenset(SUPPORTED_CURRENCIES)

# Persistence keys for the key/value store
EXPENSES_KEY = "savedExpenses"
BUDGET_SETTINGS_KEY = "budgetSettings"
CACHED_RATES_KEY = "cachedExchangeRates"


def normalize_currency(code: str) -> str:
    return code.strip().upper()
