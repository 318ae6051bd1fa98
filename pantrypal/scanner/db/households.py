"""Household, membership and storage location access."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..models import Household, Membership, StorageLocation
from ..result import DbError, DbErrorKind, Err, Ok, Result
from .schema import db_error, ensure_schema


class HouseholdDB:
    """Manages the households, household_members and storage_locations tables.

    Every public method returns ``Ok(value)`` or ``Err(DbError)``; rows are
    validated into dataclasses before they leave this class.
    """

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

    def get_membership(self, user_id: str) -> Result[Membership | None, DbError]:
        """Return the identity's household membership, or Ok(None) if it has none."""
        try:
            row = self._get_conn().execute(
                """SELECT household_id, user_id, member_role
                   FROM household_members
                   WHERE user_id = ?
                   ORDER BY joined_at, id
                   LIMIT 1""",
                (user_id,),
            ).fetchone()
        except sqlite3.Error as e:
            return db_error(e)
        if row is None:
            return Ok(None)
        return _membership_from_row(row)

    def create_household(
        self,
        name: str,
        invite_code: str,
        currency: str = "USD",
        created_by: str | None = None,
    ) -> Result[Household, DbError]:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """INSERT INTO households (name, invite_code, currency, created_by)
                   VALUES (?, ?, ?, ?)""",
                (name, invite_code, currency, created_by),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return self.get_household(cur.lastrowid)

    def get_household(self, household_id: int) -> Result[Household, DbError]:
        try:
            row = self._get_conn().execute(
                "SELECT * FROM households WHERE id = ?", (household_id,)
            ).fetchone()
        except sqlite3.Error as e:
            return db_error(e)
        if row is None:
            return Err(DbError(DbErrorKind.NOT_FOUND, f"household {household_id} not found"))
        return Ok(
            Household(
                id=row["id"],
                name=row["name"],
                invite_code=row["invite_code"],
                currency=row["currency"],
                created_by=row["created_by"],
                created_at=row["created_at"],
            )
        )

    def add_member(
        self, household_id: int, user_id: str, role: str = "member"
    ) -> Result[Membership, DbError]:
        conn = self._get_conn()
        try:
            conn.execute(
                """INSERT INTO household_members (household_id, user_id, member_role)
                   VALUES (?, ?, ?)""",
                (household_id, user_id, role),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return Ok(Membership(household_id=household_id, user_id=user_id, role=role))

    def add_storage_location(
        self,
        household_id: int,
        name: str,
        location_type: str,
        is_default: bool = False,
    ) -> Result[StorageLocation, DbError]:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """INSERT INTO storage_locations
                   (household_id, name, location_type, is_default)
                   VALUES (?, ?, ?, ?)""",
                (household_id, name, location_type, int(is_default)),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            return db_error(e)
        return Ok(
            StorageLocation(
                id=cur.lastrowid,
                household_id=household_id,
                name=name,
                location_type=location_type,
                is_default=is_default,
            )
        )

    def get_storage_locations(
        self, household_id: int
    ) -> Result[list[StorageLocation], DbError]:
        try:
            rows = self._get_conn().execute(
                "SELECT * FROM storage_locations WHERE household_id = ? ORDER BY id",
                (household_id,),
            ).fetchall()
        except sqlite3.Error as e:
            return db_error(e)
        return Ok([
            StorageLocation(
                id=r["id"],
                household_id=r["household_id"],
                name=r["name"],
                location_type=r["location_type"],
                is_default=bool(r["is_default"]),
            )
            for r in rows
        ])


def _membership_from_row(row: sqlite3.Row) -> Result[Membership, DbError]:
    household_id = row["household_id"]
    user_id = row["user_id"]
    if not isinstance(household_id, int) or not user_id:
        return Err(DbError(DbErrorKind.INVALID_ROW, f"malformed membership row: {dict(row)}"))
    return Ok(
        Membership(
            household_id=household_id,
            user_id=user_id,
            role=row["member_role"] or "member",
        )
    )
