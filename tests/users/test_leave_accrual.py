from datetime import datetime, timezone

import pytest

from attendance_tracker.core.exceptions import ValidationError
from attendance_tracker.users.service import LeaveAccrualService


def test_accrual_credits_active_users_once_per_month(users_repo):
    alice = users_repo.add("alice", leave_days=2)
    bob = users_repo.add("bob")
    ghost = users_repo.add("ghost", is_active=False)
    svc = LeaveAccrualService(users_repo)

    assert svc.accrue(month="2025-02") == 2
    assert svc.accrue(month="2025-02") == 0

    assert users_repo.get_by_id(alice.user_id).leave_days == 3.0
    assert users_repo.get_by_id(bob.user_id).leave_days == 1.0
    assert users_repo.get_by_id(ghost.user_id).leave_days == 0.0
    assert users_repo.get_by_id(alice.user_id).last_accrued_month == "2025-02"


def test_next_month_accrues_again(users_repo):
    alice = users_repo.add("alice")
    svc = LeaveAccrualService(users_repo)

    svc.accrue(month="2025-02")
    svc.accrue(month="2025-03")

    assert users_repo.get_by_id(alice.user_id).leave_days == 2.0


def test_default_month_comes_from_clock(users_repo):
    alice = users_repo.add("alice")
    svc = LeaveAccrualService(users_repo, clock=lambda: datetime(2025, 4, 1, 0, 5, tzinfo=timezone.utc))

    assert svc.accrue() == 1
    assert users_repo.get_by_id(alice.user_id).last_accrued_month == "2025-04"


@pytest.mark.parametrize("month", ["2025-13", "04/2025", "soon"])
def test_bad_month_is_rejected(users_repo, month):
    with pytest.raises(ValidationError):
        LeaveAccrualService(users_repo).accrue(month=month)
