from __future__ import annotations

from decimal import Decimal

import pytest

from care_roster.main import create_app


@pytest.fixture
def app(container):
    app = create_app(container=container, settings_module="config.testing")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id: int, role: str, company_id: int = 1):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        sess["company_id"] = company_id


def _roster(client) -> int:
    resp = client.post(
        "/api/rosters",
        json={"title": "Week 10", "startDate": "2025-03-03", "endDate": "2025-03-09"},
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["id"]


def _shift(client, roster_id, start, end, assignee=None):
    body = {"rosterId": roster_id, "startTime": start, "endTime": end}
    if assignee is not None:
        body["assignedUserId"] = assignee
    return client.post("/api/shifts", json=body)


def test_requests_without_session_are_unauthenticated(client):
    resp = client.get("/api/rosters/1")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_shift_conflict_maps_to_409(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)
    assert _shift(client, roster_id, "2025-03-03T10:00:00Z", "2025-03-03T14:00:00Z", 10).status_code == 201
    b = _shift(client, roster_id, "2025-03-03T13:00:00Z", "2025-03-03T16:00:00Z").get_json()["data"]["id"]
    c = _shift(client, roster_id, "2025-03-03T14:00:00Z", "2025-03-03T18:00:00Z").get_json()["data"]["id"]

    conflict = client.post(f"/api/shifts/{b}/assign", json={"userId": 10})
    assert conflict.status_code == 409
    assert conflict.get_json()["error"] == "Shift conflict"

    ok = client.post(f"/api/shifts/{c}/assign", json={"userId": 10})
    assert ok.status_code == 200
    assert ok.get_json()["data"]["assignedUserId"] == 10


def test_invalid_interval_maps_to_400(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)

    resp = _shift(client, roster_id, "2025-03-03T14:00:00Z", "2025-03-03T10:00:00Z")

    assert resp.status_code == 400


def test_double_publish_maps_to_400(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)

    assert client.post(f"/api/rosters/{roster_id}/publish").status_code == 200
    again = client.post(f"/api/rosters/{roster_id}/publish")

    assert again.status_code == 400
    assert again.get_json()["error"] == "Already published"


def test_forbidden_and_not_found(client):
    login(client, 10, "EMPLOYEE")
    assert client.post("/api/rosters", json={"title": "x", "startDate": "2025-03-03", "endDate": "2025-03-04"}).status_code == 403
    assert client.get("/api/rosters/999").status_code == 404


def test_attendance_flow_with_decimal_strings(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)
    shift_id = _shift(client, roster_id, "2025-03-03T09:00:00Z", "2025-03-03T17:00:00Z", 10).get_json()["data"]["id"]

    login(client, 10, "EMPLOYEE")
    created = client.post("/api/attendance", json={"shiftId": shift_id, "clockIn": "2025-03-03T09:00:00Z"})
    assert created.status_code == 201
    attendance_id = created.get_json()["data"]["id"]

    duplicate = client.post("/api/attendance", json={"shiftId": shift_id, "clockIn": "2025-03-03T09:05:00Z"})
    assert duplicate.status_code == 400

    out = client.patch(
        f"/api/attendance/{attendance_id}",
        json={"clockOut": "2025-03-03T17:00:00Z", "breakDuration": 0.5},
    )
    assert out.status_code == 200
    assert Decimal(out.get_json()["data"]["totalHours"]) == Decimal("7.5")

    self_approve = client.patch(f"/api/attendance/{attendance_id}", json={"status": "APPROVED"})
    assert self_approve.status_code == 403


def test_payroll_amounts_round_trip_as_decimal_strings(client):
    login(client, 3, "ACCOUNTANT")
    resp = client.post(
        "/api/payroll",
        json={
            "userId": 10,
            "companyId": 1,
            "periodStart": "2025-03-03",
            "periodEnd": "2025-03-09",
            "regularHours": 35,
            "overtimeHours": 5,
            "hourlyRate": "12.50",
        },
    )
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["status"] == "DRAFT"
    assert isinstance(data["netPay"], str)
    assert Decimal(data["netPay"]) == Decimal("531.25")

    updated = client.patch(f"/api/payroll/{data['id']}", json={"bonuses": 20.00})
    assert updated.status_code == 200
    assert Decimal(updated.get_json()["data"]["netPay"]) == Decimal("551.25")


def test_stale_version_maps_to_409(client):
    login(client, 3, "ACCOUNTANT")
    created = client.post(
        "/api/payroll",
        json={
            "userId": 10,
            "companyId": 1,
            "periodStart": "2025-03-03",
            "periodEnd": "2025-03-09",
            "regularHours": "8",
            "hourlyRate": "12.50",
        },
    ).get_json()["data"]

    client.patch(f"/api/payroll/{created['id']}", json={"notes": "first"})
    stale = client.patch(f"/api/payroll/{created['id']}", json={"notes": "second", "version": created["version"]})

    assert stale.status_code == 409


def test_unexpected_errors_do_not_leak(app, client, container, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password is hunter2")

    monkeypatch.setattr(container.roster_service, "get", boom)
    login(client, 2, "MANAGER")

    resp = client.get("/api/rosters/1")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Internal server error"}


def test_non_numeric_version_is_a_validation_error(client):
    login(client, 3, "ACCOUNTANT")
    created = client.post(
        "/api/payroll",
        json={
            "userId": 10,
            "companyId": 1,
            "periodStart": "2025-03-03",
            "periodEnd": "2025-03-09",
            "regularHours": "8",
            "hourlyRate": "12.50",
        },
    ).get_json()["data"]

    resp = client.patch(f"/api/payroll/{created['id']}", json={"notes": "x", "version": "latest"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    login(client, 2, "MANAGER")
    assert client.post(f"/api/payroll/{created['id']}/approve", json={"version": "1.5"}).status_code == 400
    assert client.get("/api/payroll?userId=ten").status_code == 400


def test_payroll_list_period_filter(client):
    login(client, 3, "ACCOUNTANT")
    for start, end in (("2025-03-03", "2025-03-09"), ("2025-04-07", "2025-04-13")):
        client.post(
            "/api/payroll",
            json={"userId": 10, "companyId": 1, "periodStart": start, "periodEnd": end, "regularHours": "8", "hourlyRate": "12.50"},
        )

    resp = client.get("/api/payroll?periodStart=2025-04-01&periodEnd=2025-04-30")

    assert resp.status_code == 200
    assert [p["periodStart"][:10] for p in resp.get_json()["data"]] == ["2025-04-07"]


def test_stale_shift_edit_maps_to_409(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)
    shift = _shift(client, roster_id, "2025-03-03T10:00:00Z", "2025-03-03T14:00:00Z", 10).get_json()["data"]
    assert shift["version"] == 1

    moved = client.patch(f"/api/shifts/{shift['id']}", json={"startTime": "2025-03-03T15:00:00Z", "endTime": "2025-03-03T17:00:00Z"})
    assert moved.status_code == 200

    stale = client.patch(f"/api/shifts/{shift['id']}", json={"title": "Renamed", "version": shift["version"]})
    assert stale.status_code == 409


def test_shift_and_roster_listing_respect_publication(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)
    _shift(client, roster_id, "2025-03-03T10:00:00Z", "2025-03-03T14:00:00Z", 10)
    _shift(client, roster_id, "2025-03-04T10:00:00Z", "2025-03-04T14:00:00Z", 11)
    assert len(client.get(f"/api/shifts?rosterId={roster_id}").get_json()["data"]) == 2

    login(client, 10, "EMPLOYEE")
    assert client.get("/api/shifts").get_json()["data"] == []
    assert client.get("/api/rosters").get_json()["data"] == []

    login(client, 2, "MANAGER")
    client.post(f"/api/rosters/{roster_id}/publish")
    assert [r["id"] for r in client.get("/api/rosters?isPublished=true").get_json()["data"]] == [roster_id]
    assert client.get("/api/rosters?isPublished=maybe").status_code == 400

    login(client, 10, "EMPLOYEE")
    mine = client.get("/api/shifts").get_json()["data"]
    assert [s["assignedUserId"] for s in mine] == [10]


def test_roster_edit_and_delete_routes(client):
    login(client, 2, "MANAGER")
    roster_id = _roster(client)

    edited = client.patch(f"/api/rosters/{roster_id}", json={"title": "Week 10 (revised)", "description": "Ward B"})
    assert edited.status_code == 200
    assert edited.get_json()["data"]["title"] == "Week 10 (revised)"
    assert client.patch(f"/api/rosters/{roster_id}", json={"isPublished": False}).status_code == 400

    shift_id = _shift(client, roster_id, "2025-03-03T10:00:00Z", "2025-03-03T14:00:00Z").get_json()["data"]["id"]
    assert client.delete(f"/api/rosters/{roster_id}").status_code == 400

    assert client.delete(f"/api/shifts/{shift_id}").status_code == 200
    assert client.get(f"/api/shifts/{shift_id}").status_code == 404
    assert client.delete(f"/api/rosters/{roster_id}").status_code == 200
    assert client.get(f"/api/rosters/{roster_id}").status_code == 404
