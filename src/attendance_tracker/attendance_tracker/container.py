from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.work_calendar import OFFICE_SHIFT, WorkShift
from .core.constants import MONTHLY_LEAVE_ACCRUAL
from .database.connection import DBConfig, DatabaseConnection
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, LeaveAccrualService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    requests_repo: RequestRepository

    auth_service: AuthService
    attendance_service: AttendanceService
    request_service: RequestService
    leave_accrual_service: LeaveAccrualService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    requests_repo: RequestRepository,
    shift: WorkShift = OFFICE_SHIFT,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of any repository implementation (MySQL or in-memory)."""
    attendance_service = AttendanceService(
        attendance_repo,
        shift=shift,
        strategy_factory=AttendanceStrategyFactory(shift=shift),
    )
    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        auth_service=AuthService(users_repo),
        attendance_service=attendance_service,
        request_service=RequestService(requests_repo, attendance_service, users_repo),
        leave_accrual_service=LeaveAccrualService(users_repo, days_per_month=MONTHLY_LEAVE_ACCRUAL),
        conn=conn,
    )


def build_container(*, db_config: dict, shift: WorkShift = OFFICE_SHIFT) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        shift=shift,
        conn=conn,
    )
