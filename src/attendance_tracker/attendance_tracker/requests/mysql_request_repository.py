from __future__ import annotations

from datetime import datetime
from typing import Collection, Optional, Sequence

from ..common.datetime_utils import from_db, to_db
from ..core.enums import RequestType
from ..core.request_status import OPEN_STATUSES, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CorrectionRequest, ProcessInfo
from .repository import PROCESS_SLOTS, RequestRepository

_COLUMNS = ", ".join(
    ["request_id", "user_id", "type", "start_time", "end_time", "reason", "status", "leave_days", "created_at"]
    + [f"{slot}_{suffix}" for slot in PROCESS_SLOTS for suffix in ("by", "at", "comment")]
)


def _process_info(r: dict, slot: str) -> Optional[ProcessInfo]:
    actor = r.get(f"{slot}_by")
    if actor is None:
        return None
    return ProcessInfo(actor_id=int(actor), at=from_db(r.get(f"{slot}_at")), comment=r.get(f"{slot}_comment"))


def _to_request(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        type=RequestType(r["type"]),
        start_time=from_db(r["start_time"]),
        end_time=from_db(r["end_time"]),
        reason=r["reason"],
        status=RequestStatus(int(r["status"])),
        leave_days=float(r.get("leave_days") or 0),
        created_at=from_db(r.get("created_at")),
        confirmed_by=_process_info(r, "confirmed"),
        approved_by=_process_info(r, "approved"),
        rejected_by=_process_info(r, "rejected"),
        cancelled_by=_process_info(r, "cancelled"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        type: RequestType,
        start_time: datetime,
        end_time: datetime,
        reason: str,
        leave_days: float = 0.0,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO correction_requests(user_id, type, start_time, end_time, reason, status, leave_days)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    type.value,
                    to_db(start_time),
                    to_db(end_time),
                    reason,
                    int(RequestStatus.PENDING),
                    float(leave_days),
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM correction_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list(
        self,
        *,
        user_id: Optional[int] = None,
        statuses: Optional[Collection[RequestStatus]] = None,
        type: Optional[RequestType] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if statuses:
            codes = sorted(int(s) for s in statuses)
            clauses.append(f"status IN ({', '.join(['%s'] * len(codes))})")
            params.extend(codes)
        if type is not None:
            clauses.append("type=%s")
            params.append(type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM correction_requests
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def has_open_overlap(
        self,
        *,
        user_id: int,
        type: RequestType,
        start_time: datetime,
        end_time: datetime,
    ) -> bool:
        codes = sorted(int(s) for s in OPEN_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS hit
                FROM correction_requests
                WHERE user_id=%s AND type=%s
                  AND status IN ({', '.join(['%s'] * len(codes))})
                  AND start_time < %s AND end_time > %s
                LIMIT 1
                """,
                tuple([int(user_id), type.value] + codes + [to_db(end_time), to_db(start_time)]),
            )
            return fetchone(cur) is not None

    def transition(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        new_status: RequestStatus,
        slot: str,
        info: ProcessInfo,
    ) -> bool:
        if slot not in PROCESS_SLOTS:
            raise ValueError(f"Unknown process slot: {slot!r}")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE correction_requests
                SET status=%s, {slot}_by=%s, {slot}_at=%s, {slot}_comment=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    int(new_status),
                    int(info.actor_id),
                    to_db(info.at),
                    info.comment,
                    int(request_id),
                    int(expected),
                ),
            )
            return cur.rowcount > 0
