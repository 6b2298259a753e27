from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from expense_tracker.models import RateTable
from .base import RateProvider
from .conversion import CurrencyConverter

if TYPE_CHECKING:  # pragma: no cover
    from expense_tracker.db.dal import Database

"""Central rate cache service.

Purpose:
    Hold the current RateTable, seed it from the persisted copy at start-up
    and replace it wholesale when the provider returns a fresh table.

Design:
    - The table is swapped under a lock and then persisted; concurrent
      refreshes simply overwrite each other (last writer wins).
    - A failed fetch (provider returns None) keeps the previous table.
    - `converter()` hands out a CurrencyConverter bound to the current
      snapshot, so analytics never observe a half-updated table.
"""

logger = logging.getLogger("expense_tracker.rates")


class RateCacheService:
    def __init__(
        self,
        provider: RateProvider,
        db: "Database" | None = None,
        ttl_seconds: int = 3600,
    ):
        self._provider = provider
        self._db = db
        self._ttl = timedelta(seconds=ttl_seconds)
        self._lock = threading.Lock()
        self._table = RateTable.empty(provider.base_currency)

    # Internal --------------------------------------------------
    def _replace(self, table: RateTable, persist: bool = True) -> None:
        with self._lock:
            self._table = table
            if persist and self._db is not None:
                self._db.save_rate_table(table)

    # Public API -----------------------------------------------
    def load_cached(self) -> bool:
        """Seed the table from the persisted copy; True if one was found."""
        if self._db is None:
            return False
        cached = self._db.load_rate_table()
        if cached.is_empty:
            return False
        self._replace(cached, persist=False)
        logger.info("loaded cached exchange rates (%d currencies)", len(cached.rates))
        return True

    def refresh(self) -> bool:
        """Fetch a fresh table; True if the table was replaced."""
        table = self._provider.fetch()
        if table is None or table.is_empty:
            logger.warning("exchange rate refresh produced no update; keeping previous table")
            return False
        self._replace(table)
        logger.info("exchange rates refreshed (base %s)", table.base)
        return True

    async def refresh_async(self) -> bool:
        return await asyncio.to_thread(self.refresh)

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        table = self._table
        if table.is_empty or table.fetched_at is None:
            return True
        now = now or datetime.now()
        return now - table.fetched_at >= self._ttl

    def refresh_if_stale(self, now: Optional[datetime] = None) -> bool:
        if not self.is_stale(now):
            return False
        return self.refresh()

    def set_table(self, table: RateTable) -> None:
        self._replace(table)

    def table(self) -> RateTable:
        return self._table

    def rates_ready(self) -> bool:
        return not self._table.is_empty

    def converter(self) -> CurrencyConverter:
        return CurrencyConverter(self._table)
