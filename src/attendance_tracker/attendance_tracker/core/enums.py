from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền.

    level1 là cấp duyệt cuối, level2/level3 là cấp xác nhận (reviewer).
    USER là vai trò cũ của hệ thống, chỉ được thao tác trên dữ liệu của chính mình.
    """

    ADMIN = "admin"
    LEVEL1 = "level1"
    LEVEL2 = "level2"
    LEVEL3 = "level3"
    USER = "user"


class AttendanceStatus(str, Enum):
    """Trạng thái tổng hợp của một ngày công."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    ON_LEAVE = "on-leave"
    WFH = "wfh"


class CheckInTier(str, Enum):
    ON_TIME = "on-time"
    LATE = "late"
    MISSING = "missing"


class CheckOutTier(str, Enum):
    """Phân loại giờ về, dùng để tô màu lịch."""

    EARLY = "early"
    INSUFFICIENT = "insufficient"
    NORMAL = "normal"
    OVERTIME = "overtime"
    UNUSUAL = "unusual"
    MISSING = "missing"


class RequestType(str, Enum):
    WORK_TIME = "work-time"
    LEAVE = "leave-request"
    WFH = "wfh-request"
    OVERTIME = "overtime"
