"""Pantry item CRUD operations."""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from pathlib import Path

from ..models import InventoryItem, NewInventoryItem
from ..result import DbError, DbErrorKind, Err, Ok, Result
from .schema import db_error, ensure_schema


class InventoryDB:
    """Manages the pantry_items table."""

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

    def add_item(self, item: NewInventoryItem) -> Result[int, DbError]:
        """Insert one pantry item and commit it.

        Returns:
            Ok(row id) or Err(DbError).
        """
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """INSERT INTO pantry_items
                   (household_id, user_id, storage_id, name, category,
                    quantity, unit, expiry_date, status)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    item.household_id,
                    item.user_id,
                    item.storage_id,
                    item.name,
                    item.category,
                    item.quantity,
                    item.unit,
                    item.expiry_date,
                    item.status,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return Ok(cur.lastrowid)

    def get_household_items(
        self, household_id: int, include_inactive: bool = False
    ) -> Result[list[InventoryItem], DbError]:
        """Return the household's items ordered by expiry date.

        Consumed and wasted items are skipped unless ``include_inactive``.
        """
        sql = "SELECT * FROM pantry_items WHERE household_id = ?"
        if not include_inactive:
            sql += " AND status NOT IN ('consumed', 'wasted')"
        sql += " ORDER BY expiry_date IS NULL, expiry_date, id"
        try:
            rows = self._get_conn().execute(sql, (household_id,)).fetchall()
        except sqlite3.Error as e:
            return db_error(e)

        items: list[InventoryItem] = []
        for r in rows:
            if not r["name"]:
                return Err(DbError(DbErrorKind.INVALID_ROW, f"pantry item {r['id']} has no name"))
            items.append(
                InventoryItem(
                    id=r["id"],
                    household_id=r["household_id"],
                    user_id=r["user_id"],
                    name=r["name"],
                    category=r["category"],
                    quantity=r["quantity"],
                    unit=r["unit"],
                    expiry_date=r["expiry_date"],
                    status=r["status"],
                    created_at=r["created_at"],
                    storage_id=r["storage_id"],
                )
            )
        return Ok(items)

    def refresh_statuses(
        self, today: date | None = None, expiring_soon_days: int = 3
    ) -> Result[int, DbError]:
        """Advance fresh items to expiring_soon, and live items past expiry to expired.

        Returns:
            Ok(number of rows updated).
        """
        today = today or date.today()
        soon = today + timedelta(days=expiring_soon_days)
        conn = self._get_conn()
        try:
            expired = conn.execute(
                """UPDATE pantry_items
                   SET status = 'expired', updated_at = datetime('now')
                   WHERE status IN ('fresh', 'expiring_soon')
                     AND expiry_date IS NOT NULL
                     AND expiry_date < ?""",
                (today.isoformat(),),
            ).rowcount
            expiring = conn.execute(
                """UPDATE pantry_items
                   SET status = 'expiring_soon', updated_at = datetime('now')
                   WHERE status = 'fresh'
                     AND expiry_date IS NOT NULL
                     AND expiry_date <= ?""",
                (soon.isoformat(),),
            ).rowcount
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return Ok(expired + expiring)
