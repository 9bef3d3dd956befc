"""Declarative authorization policy.

Every role-gated action is listed here as ``(resource, action) -> roles``.
Services call :func:`ensure_allowed` instead of comparing role strings inline.
Ownership rules (e.g. only the owner may cancel) are checked by the service
on top of this table.
"""
from __future__ import annotations

from typing import FrozenSet, Mapping, Tuple, Union

from .enums import Role
from .exceptions import AuthorizationError

ALL_ROLES: FrozenSet[Role] = frozenset(Role)
REVIEWERS: FrozenSet[Role] = frozenset({Role.LEVEL2, Role.LEVEL3})
APPROVERS: FrozenSet[Role] = frozenset({Role.LEVEL1, Role.ADMIN})

POLICY: Mapping[Tuple[str, str], FrozenSet[Role]] = {
    ("attendance", "check_in"): ALL_ROLES,
    ("attendance", "check_out"): ALL_ROLES,
    ("attendance", "read_own"): ALL_ROLES,
    ("requests", "create"): ALL_ROLES,
    ("requests", "read_own"): ALL_ROLES,
    ("requests", "cancel"): ALL_ROLES,
    ("requests", "review_queue"): REVIEWERS | APPROVERS,
    ("requests", "read_any"): REVIEWERS | APPROVERS,
    ("requests", "confirm"): REVIEWERS,
    ("requests", "approve"): APPROVERS,
    ("requests", "reject"): REVIEWERS | APPROVERS,
}


def as_role(role: Union[Role, str, None]) -> Role:
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role or "").strip().lower())
    except ValueError:
        raise AuthorizationError("Vai trò không hợp lệ")


def is_allowed(role: Union[Role, str, None], resource: str, action: str) -> bool:
    allowed = POLICY.get((resource, action))
    if not allowed:
        return False
    try:
        return as_role(role) in allowed
    except AuthorizationError:
        return False


def ensure_allowed(role: Union[Role, str, None], resource: str, action: str) -> Role:
    """Return the parsed role, or raise AuthorizationError."""
    if not is_allowed(role, resource, action):
        raise AuthorizationError("Bạn không có quyền thực hiện thao tác này")
    return as_role(role)
