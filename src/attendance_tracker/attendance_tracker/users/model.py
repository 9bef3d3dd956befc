from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    ``leave_days`` là số ngày phép còn lại; ``last_accrued_month`` (YYYY-MM)
    đánh dấu tháng gần nhất đã được cộng phép.
    """

    user_id: int
    username: str
    full_name: str
    password_hash: str
    role: Role
    is_active: bool = True
    leave_days: float = 0.0
    last_accrued_month: Optional[str] = None
