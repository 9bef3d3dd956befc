from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Giao diện repository cho User.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def debit_leave_days(self, user_id: int, days: float) -> bool:
        """Subtract only if the balance covers it; False otherwise."""

        raise NotImplementedError

    def credit_leave_days(self, user_id: int, days: float) -> bool:
        raise NotImplementedError

    def accrue_monthly(self, *, month: str, days: float) -> int:
        """Credit every active user not yet credited for ``month``; returns the count."""

        raise NotImplementedError

    def upsert_account(self, *, username: str, full_name: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError
