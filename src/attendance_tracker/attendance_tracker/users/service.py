from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.constants import MONTHLY_LEAVE_ACCRUAL
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

log = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> User:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")
        return user

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise NotFoundError("Người dùng không tồn tại")
        return user

    def ensure_admin(self, *, username: str, password: str, full_name: str = "Administrator") -> int:
        """Create or reset the bootstrap admin account."""
        username = require_non_empty(username, "Tên đăng nhập")
        if not password or len(password) < 6:
            raise ValidationError("Mật khẩu tối thiểu 6 ký tự")
        user_id = self._users.upsert_account(
            username=username,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
        )
        log.info("Admin account %r ready (id=%s)", username, user_id)
        return user_id

    @staticmethod
    def to_dict(user: User) -> dict:
        return {
            "id": user.user_id,
            "username": user.username,
            "full_name": user.full_name,
            "role": user.role.value,
            "leave_days": user.leave_days,
        }


class LeaveAccrualService:
    """Monthly leave-day accrual.

    Each active user gets one day per calendar month. The per-user
    ``last_accrued_month`` marker makes a second run in the same month a no-op.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        days_per_month: float = MONTHLY_LEAVE_ACCRUAL,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._users = users
        self._days = float(days_per_month)
        self._clock = clock

    @staticmethod
    def month_key(value: datetime) -> str:
        return value.strftime("%Y-%m")

    def accrue(self, *, month: Optional[str] = None) -> int:
        month = month or self.month_key(self._clock())
        try:
            datetime.strptime(month, "%Y-%m")
        except ValueError:
            raise ValidationError(f"Tháng không hợp lệ: {month!r} (YYYY-MM)")

        credited = self._users.accrue_monthly(month=month, days=self._days)
        log.info("Leave accrual for %s: credited %s user(s) with %.1f day(s)", month, credited, self._days)
        return credited
