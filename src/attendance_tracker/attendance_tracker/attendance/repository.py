from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert (or fill) the day's check-in.

        Raises StateConflictError when the day already has a check-in, so two
        concurrent submissions leave exactly one check-in time behind.
        """

        raise NotImplementedError

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
        """Set the checkout only while none is stored; False when the guard fails."""

        raise NotImplementedError

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
        """Override used after approval workflows."""

        raise NotImplementedError
