from __future__ import annotations

from flask import Flask
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from .http import fail

_STATUS = (
    (ValidationError, 400, "VALIDATION_ERROR"),
    (AuthenticationError, 401, "UNAUTHORIZED"),
    (AuthorizationError, 403, "FORBIDDEN"),
    (NotFoundError, 404, "NOT_FOUND"),
    (StateConflictError, 409, "STATE_CONFLICT"),
)


def status_for(exc: DomainError) -> tuple[int, str]:
    for exc_type, status, code in _STATUS:
        if isinstance(exc, exc_type):
            return status, code
    return 400, "DOMAIN_ERROR"


def fail_for(exc: DomainError):
    """Map a domain exception to a JSON error response."""
    status, code = status_for(exc)
    return fail(str(exc), status=status, code=code, errors=getattr(exc, "errors", None))


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail_for(e)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        detail = str(e) if app.config.get("DEBUG") else None
        return fail("Internal server error", status=500, detail=detail)
