"""SQLite layout for the expense tracker.

Everything persisted is a JSON document under a fixed key in one table:

  - metadata(key, value, updated_at)
      savedExpenses        -> list of expense records
      budgetSettings       -> {"monthly_budget": ..., "currency": ...}
      cachedExchangeRates  -> last good rate table
      schema_version       -> integer, managed by migrate.py
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL, -- JSON document
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

UPSERT_SQL = (
    "INSERT INTO metadata(key, value) VALUES(?, ?) "
    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
    f"updated_at=({BASIC_UTC_NOW})"
)


def connect(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(path: Path) -> None:
    """Create the data directory and the metadata table if missing."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    try:
        conn.execute(METADATA_DDL)
        conn.commit()
    finally:
        conn.close()
