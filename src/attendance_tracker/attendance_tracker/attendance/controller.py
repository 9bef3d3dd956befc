from __future__ import annotations

from flask import Flask, request

from ..common.auth import Identity, token_required
from ..common.datetime_utils import parse_iso_date
from ..common.errors import fail_for
from ..common.http import ok
from ..core.exceptions import DomainError
from ..core.policy import ensure_allowed
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @token_required
    def today(identity: Identity):
        try:
            ensure_allowed(identity.role, "attendance", "read_own")
            record = svc.get_today_record(identity.user_id)
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(record) if record else None)

    @app.route("/api/attendance/my", methods=["GET"], endpoint="attendance_my")
    @token_required
    def my_attendance(identity: Identity):
        try:
            ensure_allowed(identity.role, "attendance", "read_own")
            start_raw = request.args.get("startDate") or request.args.get("start_date")
            end_raw = request.args.get("endDate") or request.args.get("end_date")
            records = svc.list_range(
                identity.user_id,
                start_date=parse_iso_date(start_raw) if start_raw else None,
                end_date=parse_iso_date(end_raw) if end_raw else None,
            )
        except DomainError as e:
            return fail_for(e)
        return ok([svc.to_dict(r) for r in records], count=len(records))

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @token_required
    def checkin(identity: Identity):
        data = request.get_json(silent=True) or {}
        try:
            ensure_allowed(identity.role, "attendance", "check_in")
            record = svc.check_in(identity.user_id, note=data.get("note"))
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(record), status=201)

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @token_required
    def checkout(identity: Identity):
        data = request.get_json(silent=True) or {}
        try:
            ensure_allowed(identity.role, "attendance", "check_out")
            record = svc.check_out(identity.user_id, note=data.get("note"))
        except DomainError as e:
            return fail_for(e)
        return ok(svc.to_dict(record))
