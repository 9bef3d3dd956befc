from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest
from werkzeug.security import generate_password_hash

from attendance_tracker.attendance.model import AttendanceRecord
from attendance_tracker.core.enums import Role
from attendance_tracker.core.exceptions import StateConflictError
from attendance_tracker.core.request_status import OPEN_STATUSES, RequestStatus
from attendance_tracker.requests.model import CorrectionRequest
from attendance_tracker.users.model import User


class FakeUsersRepo:
    def __init__(self):
        self._users: dict[int, User] = {}
        self._next_id = 1

    def add(self, username, *, role=Role.USER, password="secret123", leave_days=0.0, is_active=True) -> User:
        user = User(
            user_id=self._next_id,
            username=username,
            full_name=username.title(),
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
            leave_days=float(leave_days),
        )
        self._users[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_username(self, username):
        return next((u for u in self._users.values() if u.username == username), None)

    def debit_leave_days(self, user_id, days):
        user = self._users.get(int(user_id))
        if not user or user.leave_days < days:
            return False
        self._users[user.user_id] = replace(user, leave_days=user.leave_days - days)
        return True

    def credit_leave_days(self, user_id, days):
        user = self._users.get(int(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(user, leave_days=user.leave_days + days)
        return True

    def accrue_monthly(self, *, month, days):
        credited = 0
        for user in list(self._users.values()):
            if user.is_active and user.last_accrued_month != month:
                self._users[user.user_id] = replace(
                    user, leave_days=user.leave_days + days, last_accrued_month=month
                )
                credited += 1
        return credited

    def upsert_account(self, *, username, full_name, password_hash, role):
        existing = self.get_by_username(username)
        if existing:
            self._users[existing.user_id] = replace(
                existing, full_name=full_name, password_hash=password_hash, role=role, is_active=True
            )
            return existing.user_id
        user = User(
            user_id=self._next_id,
            username=username,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
        )
        self._users[user.user_id] = user
        self._next_id += 1
        return user.user_id


class FakeAttendanceRepo:
    def __init__(self):
        self._rows: dict[tuple[int, date], AttendanceRecord] = {}
        self._next_id = 1

    def all(self):
        return list(self._rows.values())

    def get_for_user_and_date(self, user_id, work_date):
        return self._rows.get((int(user_id), work_date))

    def list_for_user(self, user_id, *, start_date=None, end_date=None):
        rows = [
            r
            for (uid, d), r in self._rows.items()
            if uid == int(user_id) and (start_date is None or d >= start_date) and (end_date is None or d <= end_date)
        ]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def record_checkin(self, *, user_id, work_date, check_in_time, status, check_in_status, note=None):
        key = (int(user_id), work_date)
        current = self._rows.get(key)
        if current and current.check_in_time is not None:
            raise StateConflictError("Bạn đã chấm công vào hôm nay rồi")
        rid = current.attendance_id if current else self._next_id
        if not current:
            self._next_id += 1
        self._rows[key] = AttendanceRecord(
            attendance_id=rid,
            user_id=int(user_id),
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            check_in_status=check_in_status,
            check_in_note=note,
        )
        return rid

    def update_checkout(self, *, attendance_id, check_out_time, status, check_out_status, total_hours, note=None):
        for key, r in self._rows.items():
            if r.attendance_id == attendance_id and r.check_out_time is None:
                self._rows[key] = replace(
                    r,
                    check_out_time=check_out_time,
                    status=status,
                    check_out_status=check_out_status,
                    total_hours=total_hours,
                    check_out_note=note,
                )
                return True
        return False

    def admin_upsert_record(
        self,
        *,
        user_id,
        work_date,
        check_in_time,
        check_out_time,
        status,
        check_in_status,
        check_out_status,
        total_hours,
        note=None,
    ):
        key = (int(user_id), work_date)
        current = self._rows.get(key)
        rid = current.attendance_id if current else self._next_id
        if not current:
            self._next_id += 1
        self._rows[key] = AttendanceRecord(
            attendance_id=rid,
            user_id=int(user_id),
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            check_in_status=check_in_status,
            check_out_status=check_out_status,
            total_hours=total_hours,
            check_in_note=current.check_in_note if current else None,
            check_out_note=note or (current.check_out_note if current else None),
        )
        return rid


class FakeRequestsRepo:
    def __init__(self):
        self._rows: dict[int, CorrectionRequest] = {}
        self._next_id = 1

    def create(self, *, user_id, type, start_time, end_time, reason, leave_days=0.0):
        rid = self._next_id
        self._next_id += 1
        self._rows[rid] = CorrectionRequest(
            request_id=rid,
            user_id=int(user_id),
            type=type,
            start_time=start_time,
            end_time=end_time,
            reason=reason,
            status=RequestStatus.PENDING,
            leave_days=float(leave_days),
            created_at=datetime(2025, 1, 1, 3, 0, 0),
        )
        return rid

    def get(self, request_id):
        return self._rows.get(int(request_id))

    def list(self, *, user_id=None, statuses=None, type=None, limit=200):
        rows = [
            r
            for r in self._rows.values()
            if (user_id is None or r.user_id == user_id)
            and (not statuses or r.status in statuses)
            and (type is None or r.type == type)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def has_open_overlap(self, *, user_id, type, start_time, end_time):
        return any(
            r.user_id == user_id
            and r.type == type
            and r.status in OPEN_STATUSES
            and r.start_time < end_time
            and r.end_time > start_time
            for r in self._rows.values()
        )

    def transition(self, *, request_id, expected, new_status, slot, info):
        req = self._rows.get(int(request_id))
        if not req or req.status != expected:
            return False
        self._rows[req.request_id] = replace(req, status=new_status, **{f"{slot}_by": info})
        return True


@pytest.fixture()
def users_repo():
    return FakeUsersRepo()


@pytest.fixture()
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture()
def requests_repo():
    return FakeRequestsRepo()
