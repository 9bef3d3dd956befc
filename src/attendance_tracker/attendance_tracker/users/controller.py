from __future__ import annotations

from flask import Flask, request

from ..common.auth import Identity, issue_token, token_required
from ..common.errors import fail_for
from ..common.http import ok
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        except DomainError as e:
            return fail_for(e)

        token = issue_token(user_id=user.user_id, role=user.role)
        app.logger.info("User %s logged in", user.username)
        return ok({"access_token": token, "user": container.auth_service.to_dict(user)})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @token_required
    def me(identity: Identity):
        try:
            user = container.auth_service.get_profile(identity.user_id)
        except DomainError as e:
            return fail_for(e)
        return ok(container.auth_service.to_dict(user))
