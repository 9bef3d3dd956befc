from __future__ import annotations

from flask import Flask, request

from ..common.auth import Identity, token_required
from ..common.errors import fail_for
from ..common.http import ok
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.request_service

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/requests", methods=["POST"], endpoint="requests_create")
    @token_required
    def create_request(identity: Identity):
        data = _body()
        try:
            req = svc.create(
                role=identity.role,
                user_id=identity.user_id,
                type=data.get("type"),
                start_time=data.get("startTime") or data.get("start_time"),
                end_time=data.get("endTime") or data.get("end_time"),
                reason=data.get("reason", ""),
                leave_days=data.get("leaveDays", data.get("leave_days")),
            )
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req), status=201)

    @app.route("/api/requests", methods=["GET"], endpoint="requests_mine")
    @token_required
    def my_requests(identity: Identity):
        try:
            items = svc.list_my_requests(
                role=identity.role,
                user_id=identity.user_id,
                status=request.args.get("status"),
                type=request.args.get("type"),
            )
        except DomainError as e:
            return fail_for(e)
        return ok([svc.to_dict(r) for r in items], count=len(items))

    @app.route("/api/requests/pending", methods=["GET"], endpoint="requests_pending")
    @token_required
    def review_queue(identity: Identity):
        try:
            items = svc.list_review_queue(role=identity.role)
        except DomainError as e:
            return fail_for(e)
        return ok([svc.to_dict(r) for r in items], count=len(items))

    @app.route("/api/requests/<int:request_id>", methods=["GET"], endpoint="requests_detail")
    @token_required
    def request_detail(identity: Identity, request_id: int):
        try:
            req = svc.get(role=identity.role, user_id=identity.user_id, request_id=request_id)
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req))

    @app.route("/api/requests/<int:request_id>/confirm", methods=["POST"], endpoint="requests_confirm")
    @token_required
    def confirm_request(identity: Identity, request_id: int):
        try:
            req = svc.confirm(
                role=identity.role,
                actor_id=identity.user_id,
                request_id=request_id,
                comment=_body().get("comment", ""),
            )
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req))

    @app.route("/api/requests/<int:request_id>/approve", methods=["POST"], endpoint="requests_approve")
    @token_required
    def approve_request(identity: Identity, request_id: int):
        try:
            req = svc.approve(
                role=identity.role,
                actor_id=identity.user_id,
                request_id=request_id,
                comment=_body().get("comment", ""),
            )
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req))

    @app.route("/api/requests/<int:request_id>/reject", methods=["POST"], endpoint="requests_reject")
    @token_required
    def reject_request(identity: Identity, request_id: int):
        try:
            req = svc.reject(
                role=identity.role,
                actor_id=identity.user_id,
                request_id=request_id,
                comment=_body().get("comment", ""),
            )
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req))

    @app.route("/api/requests/<int:request_id>/cancel", methods=["POST"], endpoint="requests_cancel")
    @token_required
    def cancel_request(identity: Identity, request_id: int):
        data = _body()
        try:
            req = svc.cancel(
                role=identity.role,
                actor_id=identity.user_id,
                request_id=request_id,
                reason=data.get("reason", data.get("comment", "")),
            )
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(req))
