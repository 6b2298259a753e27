"""Schema / document migrations.

The stored JSON documents evolve with the models; `schema_version` in the
metadata table records which upgrades have run. Every step is idempotent so
`apply_migrations` is safe to call on each start.

History:
    1 -> initial expense documents (no `note` field)
    2 -> every expense record carries `note` (empty string when absent)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Callable, Dict, Optional

from expense_tracker.models.constants import EXPENSES_KEY
from .schema import UPSERT_SQL, connect, init_db

logger = logging.getLogger("expense_tracker.db")

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    row = conn.execute(
        "SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,)
    ).fetchone()
    return int(row["value"]) if row else None


def _load_document(conn: sqlite3.Connection, key: str):
    row = conn.execute("SELECT value FROM metadata WHERE key=?", (key,)).fetchone()
    if not row:
        return None
    try:
        return json.loads(row["value"])
    except ValueError:
        # left for the loader's fallback
        return None


def _add_expense_notes(conn: sqlite3.Connection) -> None:
    records = _load_document(conn, EXPENSES_KEY)
    if not isinstance(records, list):
        return
    missing = [r for r in records if isinstance(r, dict) and "note" not in r]
    for rec in missing:
        rec["note"] = ""
    if missing:
        conn.execute(UPSERT_SQL, (EXPENSES_KEY, json.dumps(records)))
        logger.info("migrated %d expense records to include notes", len(missing))


MIGRATIONS: Dict[int, Callable[[sqlite3.Connection], None]] = {
    2: _add_expense_notes,
}


def apply_migrations(db_path: Path) -> int:
    """Apply pending migrations and return the resulting schema version."""
    init_db(db_path)
    with closing(connect(db_path)) as conn:
        version = _get_schema_version(conn) or 1
        try:
            for target in sorted(MIGRATIONS):
                if version < target:
                    MIGRATIONS[target](conn)
                    version = target
            conn.execute(UPSERT_SQL, (SCHEMA_VERSION_KEY, str(version)))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
    return version
