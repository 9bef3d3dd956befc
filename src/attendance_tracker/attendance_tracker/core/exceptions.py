from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, errors: Optional[Sequence[dict]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the requested resource does not exist."""


class StateConflictError(DomainError):
    """Raised when a transition targets a stale or terminal state."""
