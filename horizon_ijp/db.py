"""
SQLite-backed key-value storage.

The marketplace keeps each entity collection as one JSON blob under a
fixed key.  In a single process the blobs can simply live in memory
(``MemoryStorage``); this module provides the durable variant so that a
demo server keeps its data across restarts.  The schema is a single
``kv_store`` table, created on first connection.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .store import KeyValueStore

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""


class SQLiteStorage(KeyValueStore):
    """Wrapper around a sqlite3 connection exposing the key-value interface.

    The connection is shared across FastAPI's worker threads, which is
    safe here because every operation is a single autocommitted
    statement.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def __enter__(self) -> "SQLiteStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _ensure_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def get(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now(timezone.utc).isoformat()),
        )
        self.conn.commit()

    def remove(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()

    def clear(self) -> None:
        self.conn.execute("DELETE FROM kv_store")
        self.conn.commit()

    def keys(self) -> List[str]:
        return [row["key"] for row in self.conn.execute("SELECT key FROM kv_store ORDER BY key")]
