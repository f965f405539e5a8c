from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.timeclock.timeclock.main import create_app
from src.timeclock.timeclock.punches.model import Punch

CHICAGO = ZoneInfo("America/Chicago")


@pytest.fixture
def container(job, make_services):
    closed = Punch(
        punch_id="p1",
        applicant_id="a2",
        job_id="job-1",
        time_in=datetime(2024, 6, 10, 9, 0, tzinfo=CHICAGO),
        time_out=datetime(2024, 6, 10, 12, 0, tzinfo=CHICAGO),
    )
    return make_services(job, punches=[closed])


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.delenv("TIMECLOCK_SETTINGS", raising=False)
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_shift_window(client):
    resp = client.get("/api/jobs/job-1/shift-window?applicantId=a1&at=2024-06-10T10:00:00")

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["start"] == "2024-06-10T14:00:00Z"
    assert body["end"] == "2024-06-10T22:00:00Z"
    assert body["shiftSlug"] == "day"


def test_shift_window_none(client):
    body = client.get("/api/jobs/job-1/shift-window?applicantId=a1&at=2024-06-15T10:00:00").get_json()
    assert body["start"] is None and body["end"] is None


def test_missing_applicant_is_bad_request(client):
    resp = client.get("/api/jobs/job-1/clock-in-status")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid-request"


def test_unknown_job_is_not_found(client):
    resp = client.get("/api/jobs/nope/clock-in-status?applicantId=a1&at=2024-06-10T10:00:00")
    assert resp.status_code == 404


def test_clock_in_status(client):
    body = client.get("/api/jobs/job-1/clock-in-status?applicantId=a1&at=2024-06-10T08:00:00").get_json()

    assert body["canClockIn"] is False
    assert body["minutesUntilEligible"] == 45


def test_clock_in_then_out(client):
    resp = client.post("/api/jobs/job-1/punches", json={"applicantId": "a1", "at": "2024-06-10T08:55:00"})
    assert resp.status_code == 201
    punch = resp.get_json()["punch"]
    assert punch["timeIn"] == "2024-06-10T14:00:00Z"
    assert punch["timeOut"] is None
    assert punch["shiftSlug"] == "day"

    resp = client.post("/api/jobs/job-1/punches", json={"applicantId": "a1", "at": "2024-06-10T09:05:00"})
    assert resp.status_code == 409

    resp = client.put(f"/api/punches/{punch['_id']}", json={"action": "clockOut", "at": "2024-06-10T17:00:00"})
    assert resp.status_code == 200
    assert resp.get_json()["punch"]["timeOut"] == "2024-06-10T22:00:00Z"

    resp = client.put(f"/api/punches/{punch['_id']}", json={"action": "clockOut", "at": "2024-06-10T17:01:00"})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "invalid-transition"


def test_clock_in_too_early(client):
    resp = client.post("/api/jobs/job-1/punches", json={"applicantId": "a1", "at": "2024-06-10T08:00:00"})

    body = resp.get_json()
    assert resp.status_code == 400
    assert body["error"] == "clock-in-not-allowed"
    assert body["minutesUntilEligible"] == 45


def test_invalid_coordinates(client):
    resp = client.post(
        "/api/jobs/job-1/punches",
        json={"applicantId": "a1", "at": "2024-06-10T09:00:00", "clockInCoordinates": {"latitude": "x"}},
    )
    assert resp.status_code == 400


def test_update_punch_overlap(client):
    resp = client.post("/api/jobs/job-1/punches", json={"applicantId": "a2", "at": "2024-06-10T13:00:00"})
    punch_id = resp.get_json()["punch"]["_id"]
    client.put(f"/api/punches/{punch_id}", json={"action": "clockOut", "at": "2024-06-10T15:00:00"})

    resp = client.put(
        f"/api/punches/{punch_id}",
        json={"action": "update", "timeIn": "2024-06-10T11:00:00", "timeOut": "2024-06-10T15:00:00"},
    )
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "punch-overlap"

    resp = client.put(
        f"/api/punches/{punch_id}",
        json={"action": "update", "timeIn": "2024-06-10T12:00:00", "timeOut": "2024-06-10T15:00:00"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["punch"]["timeIn"] == "2024-06-10T17:00:00Z"


def test_unknown_action(client):
    resp = client.put("/api/punches/p1", json={"action": "delete"})
    assert resp.status_code == 400


def test_sweep(client):
    client.post("/api/jobs/job-1/punches", json={"applicantId": "a1", "at": "2024-06-10T09:00:00"})

    body = client.post("/api/jobs/job-1/punches/sweep", json={"at": "2024-06-11T07:00:00"}).get_json()

    assert body["success"] is True
    assert len(body["flagged"]) == 1
    assert body["flagged"][0]["flaggedAbandoned"] is True


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
