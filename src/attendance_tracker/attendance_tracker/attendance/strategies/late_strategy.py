from __future__ import annotations

from ...core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, tier: CheckInTier) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)

    def decide_checkout(self, *, current: AttendanceStatus, tier: CheckOutTier, hours: float) -> StatusDecision:
        return StatusDecision(status=current)
