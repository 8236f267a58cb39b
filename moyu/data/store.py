"""
KeyValueStore — the single place where SQL lives.

Settings, the break history, the running total and the fish collection are
all JSON values under a handful of well-known keys. Callers only ever see
``get`` / ``set`` / ``set_many``; any sqlite failure surfaces as
StorageUnavailable.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, Optional

from moyu.errors import StorageUnavailable

logger = logging.getLogger(__name__)

# Well-known keys
KEY_WORK_APPS = "workApps"
KEY_SALARY = "salary"
KEY_WORK_DAYS = "workDays"
KEY_WORK_HOURS = "workHours"
KEY_CURRENCY = "currencySymbol"
KEY_TRACKING_ENABLED = "isTrackingEnabled"
KEY_WORK_INTERVAL_MIN = "workIntervalMinutes"
KEY_BREAK_HISTORY = "breakHistory"
KEY_TOTAL_SECONDS = "totalLoafingSeconds"
KEY_FISH = "fish"


class KeyValueStore:
    """Data-access layer wrapping a sqlite3 connection."""

    def __init__(self, conn: Optional[sqlite3.Connection]) -> None:
        self.conn = conn

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = self._require_conn().execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot read '{key}': {exc}") from exc
        if row is None:
            return default
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, Any]) -> None:
        """Write several keys in one transaction: all land or none do."""
        conn = self._require_conn()
        try:
            with conn:
                conn.executemany(
                    "INSERT INTO kv_store (key, value, updated_at) "
                    "VALUES (?, ?, datetime('now')) "
                    "ON CONFLICT(key) DO UPDATE SET "
                    "value = excluded.value, updated_at = excluded.updated_at",
                    [(k, json.dumps(v, ensure_ascii=False)) for k, v in values.items()],
                )
        except sqlite3.Error as exc:
            raise StorageUnavailable(
                f"Cannot write {sorted(values)}: {exc}"
            ) from exc

    def delete(self, key: str) -> None:
        conn = self._require_conn()
        try:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot delete '{key}': {exc}") from exc

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageUnavailable("Database is not connected.")
        return self.conn


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------
# What this file does:
#   Stores JSON values by key in the kv_store table. Every other module goes
#   through this class instead of writing SQL.
#
# Key methods:
#   - get(key, default): decoded value or the default.
#   - set_many(mapping): upserts inside one ``with conn:`` transaction, so
#     the ledger can write history and running total together.
#
# Data flow:
#   SessionLedger / SettingsService → KeyValueStore → SQL → sqlite3.Row →
#   json.loads → plain Python lists/dicts/numbers
