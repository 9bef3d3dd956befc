"""Bearer-token identity for the JSON API.

Tokens are issued by flask-jwt-extended at login. The identity is the user id
(as a string) and the role travels as an additional ``role`` claim, so
handlers do not need a database round trip to know who is calling.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..extensions import jwt
from .errors import fail_for
from .http import fail


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role


def issue_token(*, user_id: int, role: Role) -> str:
    return create_access_token(identity=str(user_id), additional_claims={"role": role.value})


def current_identity() -> Identity:
    uid = get_jwt_identity()
    claims = get_jwt() or {}
    try:
        return Identity(user_id=int(uid), role=Role(claims.get("role")))
    except (TypeError, ValueError):
        raise AuthenticationError("Token không hợp lệ")


def token_required(view):
    """Verify the bearer token and pass the caller's Identity as first argument."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        try:
            identity = current_identity()
        except AuthenticationError as e:
            return fail_for(e)
        return view(identity, *args, **kwargs)

    return wrapper


def _missing_token(reason: str):
    return fail("Access denied. No token provided.", status=401, code="UNAUTHORIZED", detail=reason)


def _invalid_token(reason: str):
    return fail("Invalid token.", status=401, code="UNAUTHORIZED", detail=reason)


def _expired_token(jwt_header, jwt_payload):
    return fail("Token expired.", status=401, code="TOKEN_EXPIRED")


def init_jwt(app) -> None:
    jwt.init_app(app)
    jwt.unauthorized_loader(_missing_token)
    jwt.invalid_token_loader(_invalid_token)
    jwt.expired_token_loader(_expired_token)
