from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, username, full_name, password_hash, role, is_active, leave_days, last_accrued_month"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        leave_days=float(row.get("leave_days") or 0),
        last_accrued_month=row.get("last_accrued_month"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def debit_leave_days(self, user_id: int, days: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET leave_days = leave_days - %s WHERE user_id=%s AND leave_days >= %s",
                (float(days), int(user_id), float(days)),
            )
            return cur.rowcount > 0

    def credit_leave_days(self, user_id: int, days: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET leave_days = leave_days + %s WHERE user_id=%s",
                (float(days), int(user_id)),
            )
            return cur.rowcount > 0

    def accrue_monthly(self, *, month: str, days: float) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET leave_days = leave_days + %s, last_accrued_month = %s
                WHERE is_active = 1 AND (last_accrued_month IS NULL OR last_accrued_month <> %s)
                """,
                (float(days), month, month),
            )
            return int(cur.rowcount)

    def upsert_account(self, *, username: str, full_name: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users (username, full_name, password_hash, role, is_active)
                VALUES (%s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    user_id=LAST_INSERT_ID(user_id),
                    full_name=VALUES(full_name),
                    password_hash=VALUES(password_hash),
                    role=VALUES(role),
                    is_active=1
                """,
                (username, full_name, password_hash, role.value),
            )
            return int(cur.lastrowid)
