from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .work_calendar import OFFICE_SHIFT, WorkShift


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the WorkCalendar tiers."""

    shift: WorkShift = OFFICE_SHIFT

    def for_checkin(self, *, tier: CheckInTier) -> AttendanceStrategy:
        if tier == CheckInTier.LATE:
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, current_status: AttendanceStatus, tier: CheckOutTier, hours: float) -> AttendanceStrategy:
        if tier != CheckOutTier.MISSING and hours < self.shift.required_hours / 2:
            return HalfDayStrategy()
        if current_status == AttendanceStatus.LATE:
            return LateStrategy()
        return NormalStrategy()
