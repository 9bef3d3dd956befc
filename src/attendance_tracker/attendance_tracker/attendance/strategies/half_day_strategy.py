from __future__ import annotations

from ...core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Checkout after working less than half of the required hours."""

    def decide_checkin(self, *, tier: CheckInTier) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, current: AttendanceStatus, tier: CheckOutTier, hours: float) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"Chỉ làm {hours:.1f} giờ")
