from __future__ import annotations

"""Rate provider abstraction.

A provider produces a complete RateTable or None ("no update"); it never
raises for network or decode problems.
"""
from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.models import RateTable
from expense_tracker.models.constants import BASE_CURRENCY


class RateProvider(ABC):
    base_currency: str = BASE_CURRENCY

    @abstractmethod
    def fetch(self) -> Optional[RateTable]:
        """Return a fresh table of rates per 1 unit of base_currency, or None."""
        raise NotImplementedError
