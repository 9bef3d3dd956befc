from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import isoformat, now_utc
from ..common.validators import optional_text
from ..core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from ..core.exceptions import StateConflictError, ValidationError
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .work_calendar import (
    OFFICE_SHIFT,
    WorkShift,
    calculate_work_hours,
    classify_check_in,
    classify_check_out,
    local_date,
    localize,
)

log = logging.getLogger(__name__)

CALENDAR_COLORS = {
    "green": "#4CAF50",
    "yellow": "#FFC107",
    "blue": "#2196F3",
    "purple": "#9C27B0",
    "red": "#F44336",
    "grey": "#9E9E9E",
}


def calendar_color(record: AttendanceRecord) -> str:
    """Color shown on the calendar cell of a day."""
    if record.status in (AttendanceStatus.ON_LEAVE, AttendanceStatus.WFH):
        return CALENDAR_COLORS["grey"]
    if record.check_in_time is None:
        return CALENDAR_COLORS["grey"]

    tier = record.check_out_status
    if tier == CheckOutTier.MISSING:
        return CALENDAR_COLORS["red"]
    if tier == CheckOutTier.UNUSUAL:
        return CALENDAR_COLORS["purple"]
    if tier == CheckOutTier.OVERTIME:
        return CALENDAR_COLORS["blue"]
    if tier in (CheckOutTier.EARLY, CheckOutTier.INSUFFICIENT) or record.check_in_status == CheckInTier.LATE:
        return CALENDAR_COLORS["yellow"]
    return CALENDAR_COLORS["green"]


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        shift: WorkShift = OFFICE_SHIFT,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._shift = shift
        self._factory = strategy_factory or AttendanceStrategyFactory(shift=shift)
        self._clock = clock

    @property
    def shift(self) -> WorkShift:
        return self._shift

    def today(self, *, now: datetime | None = None) -> date:
        return local_date(now or self._clock(), self._shift)

    def check_in(self, user_id: int, *, note: Optional[str] = None, now: datetime | None = None) -> AttendanceRecord:
        now = localize(now or self._clock(), self._shift)
        today = local_date(now, self._shift)

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing and existing.check_in_time is not None:
            raise ValidationError("Bạn đã chấm công vào hôm nay rồi")

        tier = classify_check_in(now, self._shift)
        decision = self._factory.for_checkin(tier=tier).decide_checkin(tier=tier)

        try:
            self._attendance.record_checkin(
                user_id=user_id,
                work_date=today,
                check_in_time=now,
                status=decision.status,
                check_in_status=tier,
                note=optional_text(note),
            )
        except StateConflictError:
            log.warning("Duplicate check-in for user %s on %s", user_id, today)
            raise

        log.info("User %s checked in on %s (%s)", user_id, today, tier.value)
        return self._reload(user_id, today)

    def check_out(self, user_id: int, *, note: Optional[str] = None, now: datetime | None = None) -> AttendanceRecord:
        now = localize(now or self._clock(), self._shift)
        today = local_date(now, self._shift)

        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record or record.check_in_time is None:
            raise ValidationError("Bạn cần chấm công vào trước")
        if record.check_out_time is not None:
            raise ValidationError("Bạn đã chấm công ra hôm nay rồi")

        hours = calculate_work_hours(record.check_in_time, now, self._shift)
        tier = classify_check_out(record.check_in_time, now, self._shift)
        strategy = self._factory.for_checkout(current_status=record.status, tier=tier, hours=hours)
        decision = strategy.decide_checkout(current=record.status, tier=tier, hours=hours)

        ok = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            status=decision.status,
            check_out_status=tier,
            total_hours=hours,
            note=optional_text(note) or decision.note,
        )
        if not ok:
            log.warning("Duplicate check-out for user %s on %s", user_id, today)
            raise StateConflictError("Bạn đã chấm công ra hôm nay rồi")

        log.info("User %s checked out on %s (%.2fh, %s)", user_id, today, hours, tier.value)
        return self._reload(user_id, today)

    def get_today_record(self, user_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, self.today(now=now))

    def get_record(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(user_id, work_date)

    def list_range(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("Ngày kết thúc phải >= ngày bắt đầu")
        return self._attendance.list_for_user(user_id, start_date=start_date, end_date=end_date)

    def amend(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: Optional[AttendanceStatus] = None,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Overwrite a day with corrected times; hours and tiers are recomputed.

        ``status`` forces the overall status (leave, WFH); otherwise it is
        derived the same way as a live check-in/check-out.
        """
        check_in_time = localize(check_in_time, self._shift) if check_in_time else None
        check_out_time = localize(check_out_time, self._shift) if check_out_time else None
        if check_in_time and check_out_time and check_out_time < check_in_time:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")

        hours = calculate_work_hours(check_in_time, check_out_time, self._shift)
        in_tier = classify_check_in(check_in_time, self._shift)
        out_tier = classify_check_out(check_in_time, check_out_time, self._shift)

        if status is None:
            status = self._factory.for_checkin(tier=in_tier).decide_checkin(tier=in_tier).status
            if check_out_time is not None:
                strategy = self._factory.for_checkout(current_status=status, tier=out_tier, hours=hours)
                status = strategy.decide_checkout(current=status, tier=out_tier, hours=hours).status

        self._attendance.admin_upsert_record(
            user_id=user_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            check_in_status=in_tier,
            check_out_status=out_tier,
            total_hours=hours,
            note=optional_text(note),
        )
        return self._reload(user_id, work_date)

    def _reload(self, user_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if record is None:
            raise StateConflictError("Không đọc lại được bản ghi chấm công")
        return record

    @staticmethod
    def to_dict(r: AttendanceRecord) -> dict:
        return {
            "id": r.attendance_id,
            "user_id": r.user_id,
            "date": r.work_date.strftime("%Y-%m-%d"),
            "check_in": {"time": isoformat(r.check_in_time), "note": r.check_in_note},
            "check_out": {"time": isoformat(r.check_out_time), "note": r.check_out_note},
            "total_hours": round(r.total_hours, 2),
            "status": r.status.value,
            "check_in_status": r.check_in_status.value,
            "check_out_status": r.check_out_status.value,
            "calendar_color": calendar_color(r),
        }
