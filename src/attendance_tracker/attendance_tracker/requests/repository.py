from __future__ import annotations

from datetime import datetime
from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import RequestType
from ..core.request_status import RequestStatus
from .model import CorrectionRequest, ProcessInfo

# Which ProcessInfo block a transition fills.
PROCESS_SLOTS = ("confirmed", "approved", "rejected", "cancelled")


class RequestRepository(Protocol):
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
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        user_id: Optional[int] = None,
        statuses: Optional[Collection[RequestStatus]] = None,
        type: Optional[RequestType] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def has_open_overlap(
        self,
        *,
        user_id: int,
        type: RequestType,
        start_time: datetime,
        end_time: datetime,
    ) -> bool:
        """True when the user has a pending/confirmed request of ``type`` overlapping the range."""

        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: int,
        expected: RequestStatus,
        new_status: RequestStatus,
        slot: str,
        info: ProcessInfo,
    ) -> bool:
        """Conditional update: only applies while the stored status equals ``expected``."""

        raise NotImplementedError
