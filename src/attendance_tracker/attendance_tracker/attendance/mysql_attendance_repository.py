from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import from_db, to_db
from ..core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from ..core.exceptions import StateConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date,
    check_in_time, check_in_note, check_out_time, check_out_note,
    total_hours, status, check_in_status, check_out_status
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=from_db(r.get("check_in_time")),
        check_out_time=from_db(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        check_in_status=CheckInTier(r.get("check_in_status") or CheckInTier.MISSING.value),
        check_out_status=CheckOutTier(r.get("check_out_status") or CheckOutTier.MISSING.value),
        total_hours=float(r.get("total_hours") or 0),
        check_in_note=r.get("check_in_note"),
        check_out_note=r.get("check_out_note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def record_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        check_in_status: CheckInTier,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, work_date, check_in_time, check_in_note, status, check_in_status, check_out_status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        work_date,
                        to_db(check_in_time),
                        note,
                        status.value,
                        check_in_status.value,
                        CheckOutTier.MISSING.value,
                    ),
                )
                return int(cur.lastrowid)
            except IntegrityError as e:
                if not is_duplicate_key(e):
                    raise

            # The day exists already (e.g. created by an approved request): fill the
            # check-in only if it is still empty.
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_note=%s, status=%s, check_in_status=%s
                WHERE user_id=%s AND work_date=%s AND check_in_time IS NULL
                """,
                (to_db(check_in_time), note, status.value, check_in_status.value, int(user_id), work_date),
            )
            if cur.rowcount == 0:
                raise StateConflictError("Bạn đã chấm công vào hôm nay rồi")

            cur.execute(
                "SELECT attendance_id FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            return int(fetchone(cur)["attendance_id"])

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        check_out_status: CheckOutTier,
        total_hours: float,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_note=%s, status=%s, check_out_status=%s, total_hours=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    to_db(check_out_time),
                    note,
                    status.value,
                    check_out_status.value,
                    round(float(total_hours), 4),
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def admin_upsert_record(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        check_in_status: CheckInTier,
        check_out_status: CheckOutTier,
        total_hours: float,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, work_date, check_in_time, check_out_time, check_out_note,
                    status, check_in_status, check_out_status, total_hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    check_in_time=VALUES(check_in_time),
                    check_out_time=VALUES(check_out_time),
                    check_out_note=COALESCE(VALUES(check_out_note), check_out_note),
                    status=VALUES(status),
                    check_in_status=VALUES(check_in_status),
                    check_out_status=VALUES(check_out_status),
                    total_hours=VALUES(total_hours)
                """,
                (
                    int(user_id),
                    work_date,
                    to_db(check_in_time),
                    to_db(check_out_time),
                    note,
                    status.value,
                    check_in_status.value,
                    check_out_status.value,
                    round(float(total_hours), 4),
                ),
            )
            return int(cur.lastrowid)
