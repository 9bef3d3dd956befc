from __future__ import annotations

from ...core.enums import AttendanceStatus, CheckInTier, CheckOutTier
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in; checkout keeps the check-in status."""

    def decide_checkin(self, *, tier: CheckInTier) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, current: AttendanceStatus, tier: CheckOutTier, hours: float) -> StatusDecision:
        return StatusDecision(status=current)
