from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from shop_v2.config.checkout_rules import state_db_path

logger = logging.getLogger(__name__)


class LocalStateRepository:
    """
    Device-scoped key/value store for client state (cart, wishlist).

    Responsibilities:
    - store / load one JSON payload per storage_key
    - create its table on first use

    Keys look like "cart-storage:{device_id}". Each key has a single writer
    (the owning device), so last write wins.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or state_db_path()
        self._ensure_table()

    # ============================================================
    # connection
    # ============================================================

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_table(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS local_state (
                    storage_key  TEXT PRIMARY KEY,
                    payload_json TEXT NOT NULL,
                    updated_at   TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ============================================================
    # read
    # ============================================================

    def load(self, storage_key: str) -> Optional[Dict[str, Any]]:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT payload_json
                FROM local_state
                WHERE storage_key = ?
                """,
                (storage_key,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        try:
            payload = json.loads(row["payload_json"])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable state for key=%s", storage_key)
            return None

        return payload if isinstance(payload, dict) else None

    # ============================================================
    # write
    # ============================================================

    def save(self, storage_key: str, payload: Dict[str, Any]) -> None:
        payload_json = json.dumps(payload, ensure_ascii=False)

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO local_state (storage_key, payload_json, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(storage_key) DO UPDATE SET
                    payload_json = excluded.payload_json,
                    updated_at   = CURRENT_TIMESTAMP
                """,
                (storage_key, payload_json),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, storage_key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "DELETE FROM local_state WHERE storage_key = ?",
                (storage_key,),
            )
            conn.commit()
        finally:
            conn.close()
