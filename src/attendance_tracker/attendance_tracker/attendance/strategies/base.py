from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus, CheckInTier, CheckOutTier


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide the overall day status."""

    @abstractmethod
    def decide_checkin(self, *, tier: CheckInTier) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, current: AttendanceStatus, tier: CheckOutTier, hours: float) -> StatusDecision:
        raise NotImplementedError
