from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CheckInTier, CheckOutTier


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công của một người trong một ngày.

    ``total_hours`` và hai trường phân loại luôn được tính lại từ giờ vào/ra.
    """

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    check_in_status: CheckInTier = CheckInTier.MISSING
    check_out_status: CheckOutTier = CheckOutTier.MISSING
    total_hours: float = 0.0
    check_in_note: Optional[str] = None
    check_out_note: Optional[str] = None
