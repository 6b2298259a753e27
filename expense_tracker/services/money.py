"""Money / rounding helpers.

Centralized so analytics, the rate service and API responses use identical
rounding semantics. Rounding happens at the output boundary only; services
keep full float precision.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or `default` when the denominator is not positive."""
    if denominator <= 0:
        return default
    return numerator / denominator


def percent_of(part: float, whole: float) -> float:
    return safe_ratio(part, whole) * 100


def format_money(amount: float, currency: str) -> str:
    """Human-readable amount used in insight text, e.g. ``EUR 1,234.50``."""
    return f"{currency} {round2(amount):,.2f}"
