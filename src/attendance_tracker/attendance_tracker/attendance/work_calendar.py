"""Official workday rules: shift window, lunch break and hour-based tiers.

All functions are pure. Timestamps may be timezone-aware (converted to the
shift timezone) or naive (read as wall-clock time in the shift timezone).
Missing timestamps never raise; they fall back to the documented defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import CheckInTier, CheckOutTier


@dataclass(frozen=True)
class WorkShift:
    work_start: time = time(8, 30)
    work_end: time = time(17, 30)
    lunch_start: time = time(12, 0)
    lunch_end: time = time(13, 0)
    required_hours: float = 8.0
    overtime_margin_hours: float = 2.0
    unusual_hours: float = 12.0
    # Leave ranges starting/ending before this time count as the morning half.
    half_day_split: time = time(13, 0)
    timezone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def overtime_hours(self) -> float:
        return self.required_hours + self.overtime_margin_hours


OFFICE_SHIFT = WorkShift()


def localize(ts: datetime, shift: WorkShift = OFFICE_SHIFT) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=shift.tz)
    return ts.astimezone(shift.tz)


def local_date(ts: datetime, shift: WorkShift = OFFICE_SHIFT) -> date:
    return localize(ts, shift).date()


def at(day: date, t: time, shift: WorkShift = OFFICE_SHIFT) -> datetime:
    return datetime.combine(day, t, tzinfo=shift.tz)


def is_work_day(value: Union[date, datetime], shift: WorkShift = OFFICE_SHIFT) -> bool:
    """Monday to Friday. There is no holiday calendar."""
    if isinstance(value, datetime):
        value = local_date(value, shift)
    return value.weekday() < 5


def iter_work_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        if is_work_day(day):
            yield day
        day += timedelta(days=1)


def calculate_work_hours(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    shift: WorkShift = OFFICE_SHIFT,
) -> float:
    """Elapsed hours minus the part spent inside the lunch window.

    The lunch window is taken on the check-in's local day, so an overnight
    span only loses the lunch hour of the first day.
    """
    if check_in is None or check_out is None:
        return 0.0

    ci = localize(check_in, shift)
    co = localize(check_out, shift)
    seconds = (co - ci).total_seconds()

    lunch_start = at(ci.date(), shift.lunch_start, shift)
    lunch_end = at(ci.date(), shift.lunch_end, shift)
    if ci < lunch_end and co > lunch_start:
        overlap = (min(co, lunch_end) - max(ci, lunch_start)).total_seconds()
        seconds -= max(overlap, 0.0)

    return max(seconds / 3600.0, 0.0)


def classify_check_in(check_in: Optional[datetime], shift: WorkShift = OFFICE_SHIFT) -> CheckInTier:
    if check_in is None:
        return CheckInTier.MISSING
    ci = localize(check_in, shift)
    if ci <= at(ci.date(), shift.work_start, shift):
        return CheckInTier.ON_TIME
    return CheckInTier.LATE


def classify_check_out(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    shift: WorkShift = OFFICE_SHIFT,
) -> CheckOutTier:
    """Checkout tier. The order of the hour thresholds matters: >12h is
    UNUSUAL even though it is also above the overtime threshold."""
    if check_out is None:
        return CheckOutTier.MISSING

    co = localize(check_out, shift)
    anchor_day = local_date(check_in, shift) if check_in is not None else co.date()
    if co < at(anchor_day, shift.work_end, shift):
        return CheckOutTier.EARLY

    hours = calculate_work_hours(check_in, check_out, shift)
    if hours < shift.required_hours:
        return CheckOutTier.INSUFFICIENT
    if hours > shift.unusual_hours:
        return CheckOutTier.UNUSUAL
    if hours > shift.overtime_hours:
        return CheckOutTier.OVERTIME
    return CheckOutTier.NORMAL


def _is_morning(ts: datetime, shift: WorkShift) -> bool:
    return ts.time() < shift.half_day_split


def calculate_leave_days(start: datetime, end: datetime, shift: WorkShift = OFFICE_SHIFT) -> float:
    """Leave days covered by ``[start, end]`` in half-day steps, weekends excluded."""
    s = localize(start, shift)
    e = localize(end, shift)
    if e < s:
        return 0.0

    if s.date() == e.date():
        if not is_work_day(s.date()):
            return 0.0
        if _is_morning(s, shift) == _is_morning(e, shift):
            return 0.5
        return 1.0

    days = 0.0
    if is_work_day(s.date()):
        days += 1.0 if _is_morning(s, shift) else 0.5

    days += sum(1.0 for _ in iter_work_days(s.date() + timedelta(days=1), e.date() - timedelta(days=1)))

    if is_work_day(e.date()):
        days += 0.5 if _is_morning(e, shift) else 1.0

    return days
