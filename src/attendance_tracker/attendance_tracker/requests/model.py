from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestType
from ..core.request_status import RequestStatus


@dataclass(frozen=True)
class ProcessInfo:
    """Ai xử lý, lúc nào, kèm ghi chú (hoặc lý do huỷ)."""

    actor_id: int
    at: datetime
    comment: Optional[str] = None


@dataclass(frozen=True)
class CorrectionRequest:
    request_id: int
    user_id: int
    type: RequestType
    start_time: datetime
    end_time: datetime
    reason: str
    status: RequestStatus
    leave_days: float = 0.0
    created_at: Optional[datetime] = None
    confirmed_by: Optional[ProcessInfo] = None
    approved_by: Optional[ProcessInfo] = None
    rejected_by: Optional[ProcessInfo] = None
    cancelled_by: Optional[ProcessInfo] = None
