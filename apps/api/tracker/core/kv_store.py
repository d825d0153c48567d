"""
Process-wide key/value store persisted in the `kv_entries` table.

One instance is created by the app lifespan and shared by all requests.
Values are anything `json.dumps` accepts; subscribers for a key are called
with `(key, value)` after each successful write (`value` is None on delete).
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from typing import Any, Callable, Dict, List, Optional

from tracker.core.db import connect
from tracker.core.ids import now_iso

_log = logging.getLogger("tracker.kv")

Subscriber = Callable[[str, Any], None]


class KeyValueStore:
    def __init__(self, database_url: Optional[str] = None) -> None:
        self._conn: Optional[sqlite3.Connection] = connect(database_url)
        self._lock = threading.RLock()
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def _db(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("KeyValueStore is closed")
        return self._conn

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            row = self._db().execute("SELECT value_json FROM kv_entries WHERE key=?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row["value_json"])

    def entry(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._db().execute(
                "SELECT key, value_json, updated_at FROM kv_entries WHERE key=?", (key,)
            ).fetchone()
        if row is None:
            return None
        return {"key": row["key"], "value": json.loads(row["value_json"]), "updated_at": row["updated_at"]}

    def keys(self) -> List[str]:
        with self._lock:
            rows = self._db().execute("SELECT key FROM kv_entries ORDER BY key ASC").fetchall()
        return [r["key"] for r in rows]

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock:
            conn = self._db()
            conn.execute(
                """
                INSERT INTO kv_entries (key, value_json, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json, updated_at=excluded.updated_at
                """,
                (key, payload, now_iso()),
            )
            conn.commit()
        self._notify(key, value)

    def delete(self, key: str) -> bool:
        with self._lock:
            conn = self._db()
            cur = conn.execute("DELETE FROM kv_entries WHERE key=?", (key,))
            conn.commit()
            removed = cur.rowcount > 0
        if removed:
            self._notify(key, None)
        return removed

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        """Register `callback` for writes to `key`; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                subs = self._subscribers.get(key, [])
                if callback in subs:
                    subs.remove(callback)
                if not subs:
                    self._subscribers.pop(key, None)

        return _unsubscribe

    def _notify(self, key: str, value: Any) -> None:
        with self._lock:
            subs = list(self._subscribers.get(key, []))
        for cb in subs:
            try:
                cb(key, value)
            except Exception:
                # one failing subscriber must not block the others or the write
                _log.exception("kv subscriber failed for key %s", key)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            self._subscribers.clear()
