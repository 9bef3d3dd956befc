"""Correction request workflow.

States::

    pending --confirm--> confirmed
    pending | confirmed --approve--> approved
    pending | confirmed --reject--> rejected
    pending | confirmed --cancel--> cancelled

approved, rejected and cancelled are terminal. Who may fire each transition
is decided by :mod:`core.policy`; every write is a conditional update on the
status that was read, so a concurrent writer loses with StateConflictError.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Collection, Optional, Sequence

from ..attendance.service import AttendanceService
from ..attendance.work_calendar import at, calculate_leave_days, iter_work_days, localize
from ..common.datetime_utils import isoformat, now_utc, parse_iso_datetime
from ..common.validators import optional_text, require_half_step, require_non_empty
from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT, MAX_LEAVE_DAYS, MIN_LEAVE_DAYS
from ..core.enums import AttendanceStatus, RequestType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from ..core.policy import APPROVERS, ensure_allowed, is_allowed
from ..core.request_status import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    RequestStatus,
    code_from_text,
    text_from_code,
)
from ..users.repository import UserRepository
from .model import CorrectionRequest, ProcessInfo
from .repository import RequestRepository

log = logging.getLogger(__name__)

_REVIEWABLE = frozenset({RequestStatus.PENDING, RequestStatus.CONFIRMED})


class RequestService:
    def __init__(
        self,
        requests: RequestRepository,
        attendance: AttendanceService,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._requests = requests
        self._attendance = attendance
        self._users = users
        self._clock = clock

    # -------- helpers --------
    @staticmethod
    def _parse_type(value: Any) -> RequestType:
        try:
            return value if isinstance(value, RequestType) else RequestType(str(value or "").strip())
        except ValueError:
            raise ValidationError(
                "Loại yêu cầu không hợp lệ",
                errors=[{"field": "type", "msg": f"Phải là một trong {[t.value for t in RequestType]}"}],
            )

    @staticmethod
    def _parse_time(value: Any, field_name: str) -> datetime:
        if isinstance(value, datetime):
            return value
        if not value:
            raise ValidationError(f"{field_name} là bắt buộc", errors=[{"field": field_name, "msg": "Thiếu giá trị"}])
        return parse_iso_datetime(str(value))

    def _get(self, request_id: int) -> CorrectionRequest:
        req = self._requests.get(int(request_id))
        if not req:
            raise NotFoundError("Yêu cầu không tồn tại")
        return req

    # -------- queries --------
    def get(self, *, role: Role, user_id: int, request_id: int) -> CorrectionRequest:
        req = self._get(request_id)
        if req.user_id != int(user_id) and not is_allowed(role, "requests", "read_any"):
            raise AuthorizationError("Bạn không có quyền xem yêu cầu này")
        return req

    def list_my_requests(
        self,
        *,
        role: Role,
        user_id: int,
        status: Any = None,
        type: Any = None,
        limit: int = DEFAULT_REQUEST_LIST_LIMIT,
    ) -> Sequence[CorrectionRequest]:
        ensure_allowed(role, "requests", "read_own")
        statuses = [RequestStatus(code_from_text(status))] if status not in (None, "") else None
        req_type = self._parse_type(type) if type not in (None, "") else None
        return self._requests.list(user_id=int(user_id), statuses=statuses, type=req_type, limit=limit)

    def list_review_queue(self, *, role: Role, limit: int = DEFAULT_REQUEST_LIST_LIMIT) -> Sequence[CorrectionRequest]:
        """Open requests the caller can act on: approvers also see confirmed ones."""
        role = ensure_allowed(role, "requests", "review_queue")
        statuses: Collection[RequestStatus] = (
            OPEN_STATUSES if role in APPROVERS else frozenset({RequestStatus.PENDING})
        )
        return self._requests.list(statuses=statuses, limit=limit)

    # -------- create --------
    def create(
        self,
        *,
        role: Role,
        user_id: int,
        type: Any,
        start_time: Any,
        end_time: Any,
        reason: str,
        leave_days: Any = None,
    ) -> CorrectionRequest:
        ensure_allowed(role, "requests", "create")

        req_type = self._parse_type(type)
        shift = self._attendance.shift
        start = localize(self._parse_time(start_time, "startTime"), shift)
        end = localize(self._parse_time(end_time, "endTime"), shift)
        reason = require_non_empty(reason, "Lý do")

        if end <= start:
            raise ValidationError("Thời gian kết thúc phải sau thời gian bắt đầu")

        days = 0.0
        if req_type == RequestType.LEAVE:
            if leave_days in (None, ""):
                leave_days = calculate_leave_days(start, end, shift)
                if leave_days <= 0:
                    raise ValidationError("Khoảng thời gian nghỉ không có ngày làm việc nào")
            days = require_half_step(
                leave_days,
                "Số ngày nghỉ",
                min_value=MIN_LEAVE_DAYS,
                max_value=MAX_LEAVE_DAYS,
            )

        if self._requests.has_open_overlap(user_id=int(user_id), type=req_type, start_time=start, end_time=end):
            raise StateConflictError("Đã có yêu cầu cùng loại đang chờ xử lý trong khoảng thời gian này")

        request_id = self._requests.create(
            user_id=int(user_id),
            type=req_type,
            start_time=start,
            end_time=end,
            reason=reason,
            leave_days=days,
        )
        log.info("Request #%s (%s) created by user %s", request_id, req_type.value, user_id)
        return self._get(request_id)

    # -------- transitions --------
    def _transition(
        self,
        *,
        req: CorrectionRequest,
        action: str,
        new_status: RequestStatus,
        slot: str,
        allowed_from: Collection[RequestStatus],
        actor_id: int,
        comment: Optional[str],
    ) -> bool:
        if req.status in TERMINAL_STATUSES:
            raise StateConflictError(f"Yêu cầu đã ở trạng thái {text_from_code(req.status)}, không thể {action}")
        if req.status not in allowed_from:
            raise StateConflictError(f"Không thể {action} yêu cầu đang ở trạng thái {text_from_code(req.status)}")

        return self._requests.transition(
            request_id=req.request_id,
            expected=req.status,
            new_status=new_status,
            slot=slot,
            info=ProcessInfo(actor_id=int(actor_id), at=self._clock(), comment=optional_text(comment)),
        )

    def _lost_race(self, req: CorrectionRequest, action: str) -> StateConflictError:
        log.warning("Request #%s changed concurrently; %s rejected", req.request_id, action)
        return StateConflictError("Yêu cầu vừa được người khác xử lý, vui lòng tải lại")

    def confirm(self, *, role: Role, actor_id: int, request_id: int, comment: str = "") -> CorrectionRequest:
        ensure_allowed(role, "requests", "confirm")
        req = self._get(request_id)
        if not self._transition(
            req=req,
            action="confirm",
            new_status=RequestStatus.CONFIRMED,
            slot="confirmed",
            allowed_from={RequestStatus.PENDING},
            actor_id=actor_id,
            comment=comment,
        ):
            raise self._lost_race(req, "confirm")
        log.info("Request #%s confirmed by user %s", req.request_id, actor_id)
        return self._get(request_id)

    def approve(self, *, role: Role, actor_id: int, request_id: int, comment: str = "") -> CorrectionRequest:
        ensure_allowed(role, "requests", "approve")
        req = self._get(request_id)
        if req.status in TERMINAL_STATUSES:
            raise StateConflictError(f"Yêu cầu đã ở trạng thái {text_from_code(req.status)}, không thể approve")

        changes = self._plan_attendance(req)
        debited = 0.0
        if req.type == RequestType.LEAVE and req.leave_days > 0:
            if not self._users.debit_leave_days(req.user_id, req.leave_days):
                raise ValidationError("Số ngày phép còn lại không đủ để duyệt yêu cầu này")
            debited = req.leave_days
            log.info("Debited %.1f leave day(s) from user %s for request #%s", debited, req.user_id, req.request_id)

        try:
            moved = self._transition(
                req=req,
                action="approve",
                new_status=RequestStatus.APPROVED,
                slot="approved",
                allowed_from=_REVIEWABLE,
                actor_id=actor_id,
                comment=comment,
            )
        except Exception:
            if debited:
                self._users.credit_leave_days(req.user_id, debited)
            raise

        if not moved:
            if debited:
                self._users.credit_leave_days(req.user_id, debited)
                log.info("Refunded %.1f leave day(s) to user %s", debited, req.user_id)
            raise self._lost_race(req, "approve")

        log.info("Request #%s approved by user %s", req.request_id, actor_id)
        self._apply_to_attendance(changes)
        return self._get(request_id)

    def reject(self, *, role: Role, actor_id: int, request_id: int, comment: str = "") -> CorrectionRequest:
        ensure_allowed(role, "requests", "reject")
        req = self._get(request_id)
        if not self._transition(
            req=req,
            action="reject",
            new_status=RequestStatus.REJECTED,
            slot="rejected",
            allowed_from=_REVIEWABLE,
            actor_id=actor_id,
            comment=comment,
        ):
            raise self._lost_race(req, "reject")
        log.info("Request #%s rejected by user %s", req.request_id, actor_id)
        return self._get(request_id)

    def cancel(self, *, role: Role, actor_id: int, request_id: int, reason: str = "") -> CorrectionRequest:
        ensure_allowed(role, "requests", "cancel")
        req = self._get(request_id)
        if req.user_id != int(actor_id):
            raise AuthorizationError("Chỉ người tạo mới được huỷ yêu cầu")
        if not self._transition(
            req=req,
            action="cancel",
            new_status=RequestStatus.CANCELLED,
            slot="cancelled",
            allowed_from=_REVIEWABLE,
            actor_id=actor_id,
            comment=reason,
        ):
            raise self._lost_race(req, "cancel")
        log.info("Request #%s cancelled by its owner", req.request_id)
        return self._get(request_id)

    # -------- approval side effects --------
    def _plan_attendance(self, req: CorrectionRequest) -> list[dict]:
        """The ``AttendanceService.amend`` calls an approval will make.

        Only reads; times are validated here, before the status moves.
        """
        shift = self._attendance.shift
        note = f"Theo yêu cầu #{req.request_id}"
        start = localize(req.start_time, shift)
        end = localize(req.end_time, shift)

        if req.type == RequestType.WORK_TIME:
            changes = [dict(work_date=start.date(), check_in_time=start, check_out_time=end)]

        elif req.type == RequestType.OVERTIME:
            day = start.date()
            current = self._attendance.get_record(req.user_id, day)
            check_in, check_out = start, end
            if current and current.check_in_time:
                check_in = min(localize(current.check_in_time, shift), start)
            if current and current.check_out_time:
                check_out = max(localize(current.check_out_time, shift), end)
            changes = [dict(work_date=day, check_in_time=check_in, check_out_time=check_out)]

        else:
            changes = []
            for day in iter_work_days(start.date(), end.date()):
                lo = max(start, at(day, shift.work_start, shift))
                hi = min(end, at(day, shift.work_end, shift))
                if hi <= lo:
                    continue
                if req.type == RequestType.WFH:
                    changes.append(
                        dict(work_date=day, check_in_time=lo, check_out_time=hi, status=AttendanceStatus.WFH)
                    )
                    continue
                portion = calculate_leave_days(lo, hi, shift)
                current = self._attendance.get_record(req.user_id, day)
                changes.append(
                    dict(
                        work_date=day,
                        check_in_time=current.check_in_time if current else None,
                        check_out_time=current.check_out_time if current else None,
                        status=AttendanceStatus.HALF_DAY if portion < 1 else AttendanceStatus.ON_LEAVE,
                    )
                )

        for change in changes:
            ci, co = change["check_in_time"], change["check_out_time"]
            if ci and co and co < ci:
                raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")
            change.update(user_id=req.user_id, note=note)
        return changes

    def _apply_to_attendance(self, changes: Sequence[dict]) -> None:
        for change in changes:
            self._attendance.amend(**change)

    # -------- serialization --------
    @staticmethod
    def _info_dict(info: Optional[ProcessInfo]) -> Optional[dict]:
        if info is None:
            return None
        return {"user_id": info.actor_id, "date": isoformat(info.at), "comment": info.comment}

    @classmethod
    def to_dict(cls, r: CorrectionRequest) -> dict:
        return {
            "id": r.request_id,
            "user_id": r.user_id,
            "type": r.type.value,
            "start_time": isoformat(r.start_time),
            "end_time": isoformat(r.end_time),
            "reason": r.reason,
            "status": int(r.status),
            "status_text": text_from_code(r.status),
            "leave_days": r.leave_days,
            "created_at": isoformat(r.created_at),
            "confirmed_by": cls._info_dict(r.confirmed_by),
            "approved_by": cls._info_dict(r.approved_by),
            "rejected_by": cls._info_dict(r.rejected_by),
            "cancelled_by": cls._info_dict(r.cancelled_by),
        }
