"""Encrypted per-user API key storage."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..result import DbError, Ok, Result
from .schema import db_error, ensure_schema


class SecretDB:
    """Manages the user_secrets table. Values are stored already encrypted."""

    def __init__(self, db_path: str | Path = "~/.config/pantrypal/pantry.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_encrypted_key(self, user_id: str, service: str) -> Result[str | None, DbError]:
        try:
            row = self._get_conn().execute(
                """SELECT api_key_encrypted FROM user_secrets
                   WHERE user_id = ? AND service = ?""",
                (user_id, service),
            ).fetchone()
        except sqlite3.Error as e:
            return db_error(e)
        return Ok(row["api_key_encrypted"] if row else None)

    def put_encrypted_key(
        self, user_id: str, service: str, token: str
    ) -> Result[None, DbError]:
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO user_secrets (user_id, service, api_key_encrypted)
                   VALUES (?, ?, ?)
                   ON CONFLICT (user_id, service) DO UPDATE SET
                       api_key_encrypted = excluded.api_key_encrypted,
                       updated_at = datetime('now')""",
                (user_id, service, token),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return Ok(None)
