from __future__ import annotations

from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from attendance_tracker.container import wire_container
from attendance_tracker.core.enums import Role
from attendance_tracker.main import create_app


@pytest.fixture()
def app(monkeypatch, users_repo, attendance_repo, requests_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    users_repo.add("alice", password="secret123", leave_days=1)
    users_repo.add("bob", password="secret123")
    users_repo.add("reviewer", role=Role.LEVEL2, password="secret123")
    users_repo.add("manager", role=Role.LEVEL1, password="secret123")
    container = wire_container(users_repo=users_repo, attendance_repo=attendance_repo, requests_repo=requests_repo)
    return create_app({"ADMIN_PASSWORD": "admin123"}, container=container)


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, username, password="secret123"):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['data']['access_token']}"}


def create_leave(client, headers, **overrides):
    body = {
        "type": "leave-request",
        "startTime": "2025-01-06T08:30:00",
        "endTime": "2025-01-06T17:30:00",
        "reason": "Việc gia đình",
    }
    body.update(overrides)
    return client.post("/api/requests", json=body, headers=headers)


def test_missing_token_is_401(client):
    resp = client.get("/api/attendance/today")

    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["message"] == "Access denied. No token provided."


def test_garbage_token_is_401(client):
    resp = client.get("/api/attendance/today", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["message"] == "Invalid token."


def test_expired_token_is_401(app, client):
    with app.app_context():
        token = create_access_token(identity="1", additional_claims={"role": "user"}, expires_delta=timedelta(minutes=-1))

    resp = client.get("/api/attendance/today", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "TOKEN_EXPIRED"


def test_wrong_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "UNAUTHORIZED"


def test_login_and_me(client):
    headers = login(client, "alice")

    resp = client.get("/api/auth/me", headers=headers)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "alice"
    assert resp.get_json()["data"]["role"] == "user"


def test_check_in_then_duplicate(client):
    headers = login(client, "alice")

    first = client.post("/api/attendance/checkin", json={"note": "hello"}, headers=headers)
    second = client.post("/api/attendance/checkin", json={}, headers=headers)
    today = client.get("/api/attendance/today", headers=headers)

    assert first.status_code == 201
    assert first.get_json()["data"]["check_in"]["note"] == "hello"
    assert second.status_code == 400
    assert second.get_json()["error"]["code"] == "VALIDATION_ERROR"
    assert today.get_json()["data"]["id"] == first.get_json()["data"]["id"]


def test_checkout_without_checkin_is_400(client):
    resp = client.post("/api/attendance/checkout", json={}, headers=login(client, "bob"))

    assert resp.status_code == 400


def test_my_attendance_rejects_bad_dates(client):
    headers = login(client, "alice")

    bad = client.get("/api/attendance/my?startDate=yesterday", headers=headers)
    empty = client.get("/api/attendance/my?startDate=2025-01-01&endDate=2025-01-31", headers=headers)

    assert bad.status_code == 400
    assert empty.status_code == 200
    assert empty.get_json()["data"] == []
    assert empty.get_json()["meta"] == {"count": 0}


def test_create_request_validation_is_400(client):
    resp = create_leave(client, login(client, "alice"), reason="")

    assert resp.status_code == 400
    assert resp.get_json()["error"]["errors"][0]["field"] == "Lý do"


def test_request_workflow_over_http(client):
    alice = login(client, "alice")
    reviewer = login(client, "reviewer")
    manager = login(client, "manager")

    created = create_leave(client, alice)
    assert created.status_code == 201
    rid = created.get_json()["data"]["id"]
    assert created.get_json()["data"]["status_text"] == "pending"

    queue = client.get("/api/requests/pending", headers=reviewer)
    assert [r["id"] for r in queue.get_json()["data"]] == [rid]

    confirmed = client.post(f"/api/requests/{rid}/confirm", json={"comment": "ok"}, headers=reviewer)
    assert confirmed.status_code == 200
    assert confirmed.get_json()["data"]["status"] == 5

    approved = client.post(f"/api/requests/{rid}/approve", json={}, headers=manager)
    again = client.post(f"/api/requests/{rid}/approve", json={}, headers=manager)
    assert approved.status_code == 200
    assert approved.get_json()["data"]["status_text"] == "approved"
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "STATE_CONFLICT"

    me = client.get("/api/auth/me", headers=alice)
    assert me.get_json()["data"]["leave_days"] == 0.0


def test_insufficient_leave_balance_is_400(client):
    bob = login(client, "bob")
    rid = create_leave(client, bob).get_json()["data"]["id"]

    resp = client.post(f"/api/requests/{rid}/approve", json={}, headers=login(client, "manager"))
    detail = client.get(f"/api/requests/{rid}", headers=bob)

    assert resp.status_code == 400
    assert detail.get_json()["data"]["status_text"] == "pending"


def test_permissions_over_http(client):
    alice = login(client, "alice")
    bob = login(client, "bob")
    rid = create_leave(client, alice).get_json()["data"]["id"]

    assert client.get("/api/requests/pending", headers=alice).status_code == 403
    assert client.post(f"/api/requests/{rid}/approve", json={}, headers=alice).status_code == 403
    assert client.get(f"/api/requests/{rid}", headers=bob).status_code == 403
    assert client.post(f"/api/requests/{rid}/cancel", json={"reason": "x"}, headers=bob).status_code == 403
    assert client.get("/api/requests/999", headers=alice).status_code == 404

    cancelled = client.post(f"/api/requests/{rid}/cancel", json={"reason": "Đổi lịch"}, headers=alice)
    assert cancelled.status_code == 200
    assert cancelled.get_json()["data"]["cancelled_by"]["comment"] == "Đổi lịch"


def test_list_my_requests_with_filters(client):
    alice = login(client, "alice")
    create_leave(client, alice)
    client.post(
        "/api/requests",
        json={
            "type": "overtime",
            "startTime": "2025-01-06T18:00:00",
            "endTime": "2025-01-06T20:00:00",
            "reason": "Release",
        },
        headers=alice,
    )

    everything = client.get("/api/requests", headers=alice).get_json()
    overtime = client.get("/api/requests?type=overtime", headers=alice).get_json()

    assert everything["meta"]["count"] == 2
    assert [r["type"] for r in overtime["data"]] == ["overtime"]


def test_unknown_route_uses_json_errors(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_cli_commands(app, users_repo):
    runner = app.test_cli_runner()

    accrued = runner.invoke(args=["accrue-leave", "--month", "2025-02"])
    assert accrued.exit_code == 0, accrued.output
    assert users_repo.get_by_username("bob").leave_days == 1.0

    bad = runner.invoke(args=["accrue-leave", "--month", "Feb"])
    assert bad.exit_code != 0

    admin = runner.invoke(args=["create-admin"])
    assert admin.exit_code == 0, admin.output
    assert users_repo.get_by_username("admin").role == Role.ADMIN
