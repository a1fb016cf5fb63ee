from __future__ import annotations

from datetime import date

import pytest

from src.duty_roster.duty_roster.common.http import status_for
from src.duty_roster.duty_roster.core.exceptions import (
    AlreadyPublishedError,
    AuthorizationError,
    DomainError,
    FatigueViolationError,
    LockUnavailableError,
    NotFoundError,
    StaffingError,
    ValidationError,
)
from src.duty_roster.duty_roster.main import create_app


@pytest.fixture
def app(monkeypatch, services):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(services)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_id, role="member"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


@pytest.mark.parametrize(
    "exc, status",
    [
        (ValidationError("bad"), 400),
        (AuthorizationError("no"), 403),
        (NotFoundError("gone"), 404),
        (AlreadyPublishedError(date(2030, 3, 4)), 409),
        (LockUnavailableError("busy"), 409),
        (StaffingError("Gate", (1,)), 409),
        (FatigueViolationError("1", date(2030, 3, 4)), 409),
        (DomainError("other"), 422),
    ],
)
def test_status_for(exc, status):
    assert status_for(exc) == status


def test_requires_session(client):
    resp = client.get("/rosters")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthenticated"


def test_generate_day_reports_blocking_post(store, client):
    store.add_post(1, "Gate", "3")
    store.add_person("1", year=1)
    _login(client, "1001", "scheduler")

    resp = client.post("/rosters/days/2030-03-04/generate", json={"duty_type": "RN"})

    assert resp.status_code == 409
    body = resp.get_json()
    assert body["error"] == "staffing"
    assert body["blocking_post_name"] == "Gate"
    assert body["required_years"] == [3]


def test_members_cannot_publish(client):
    _login(client, "1", "member")
    resp = client.post("/rosters/publish", json={"start": "2030-03-04", "end": "2030-03-04"})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"


def test_bad_dates_are_rejected(client):
    _login(client, "1001", "admin")
    resp = client.post("/rosters/generate", json={"start": "2030-03-10", "end": "2030-03-04"})
    assert resp.status_code == 400

    resp = client.post("/rosters/generate", data="not json")
    assert resp.status_code == 400


def test_swap_flow_over_http(store, client):
    store.add_post(1, "Gate", "1")
    store.add_person("1", year=1)
    store.add_person("2", year=1, normal=5)
    _login(client, "1001", "scheduler")
    resp = client.post("/rosters/days/2030-03-04/generate", json={"duty_type": "RN"})
    assert resp.status_code == 200
    (alloc,) = store.allocations_on(date(2030, 3, 4))

    _login(client, "1")
    resp = client.post("/swaps", json={"allocation_id": alloc.allocation_id, "substitute_id": "2", "reason": "exam"})
    assert resp.status_code == 201
    swap_id = resp.get_json()["swap_id"]

    _login(client, "2")
    resp = client.post(f"/swaps/{swap_id}/respond", json={"action": "accept"})
    assert resp.get_json()["status"] == "AwaitingScheduler"

    _login(client, "1001", "scheduler")
    board = client.get("/rosters/dashboard").get_json()
    assert [s["swap_id"] for s in board["awaiting_swaps"]] == [swap_id]
    resp = client.post(f"/swaps/{swap_id}/approve")
    assert resp.status_code == 200

    resp = client.post(f"/swaps/{swap_id}/approve")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "not_found_or_not_pending"

    _login(client, "2")
    view = client.get("/rosters?start=2030-03-04&end=2030-03-04").get_json()
    assert view["drafts"][0]["allocations"][0]["is_mine"] is True
    debts = client.get("/debts/mine").get_json()["debts"]
    assert [d["creditor_id"] for d in debts] == ["2"]
