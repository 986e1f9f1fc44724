# backend/tests/routes/test_rosters_routes.py
"""
Route tests for /api/v1/rosters.

The app runs against the per-test SQLite engine through dependency
overrides; caller identity comes from the gateway headers.
"""

from datetime import date, time
from typing import Dict

from fastapi.testclient import TestClient
import pytest

from aeroroster.api.dependencies.database import get_db, get_session_factory
from aeroroster.core.exceptions import RepositoryException
from aeroroster.core.ulid_helper import generate_ulid
from aeroroster.main import app
from aeroroster.repositories.roster_rule_repository import RosterRuleRepository
from tests.helpers.roster import MONDAY, TENANT_ID, WEDNESDAY, rule_payload

BASE_URL = "/api/v1/rosters"

ADMIN_HEADERS: Dict[str, str] = {
    "X-User-ID": "user-admin",
    "X-User-Role": "admin",
    "X-Tenant-ID": TENANT_ID,
}
STUDENT_HEADERS: Dict[str, str] = {**ADMIN_HEADERS, "X-User-Role": "student"}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestCreateRosterRules:
    def test_create_single_rule(self, client, instructor):
        response = client.post(BASE_URL, json=rule_payload(instructor.id), headers=ADMIN_HEADERS)

        assert response.status_code == 201
        body = response.json()
        assert len(body) == 1
        assert body[0]["instructor_id"] == instructor.id
        assert body[0]["day_of_week"] == MONDAY
        assert body[0]["start_time"] == "09:00:00"
        assert body[0]["end_time"] == "12:00:00"
        assert body[0]["effective_until"] is None
        assert body[0]["is_active"] is True

    def test_create_several_days(self, client, instructor):
        payload = rule_payload(instructor.id, day_of_week=None, days_of_week=[WEDNESDAY, MONDAY])

        response = client.post(BASE_URL, json=payload, headers=ADMIN_HEADERS)

        assert response.status_code == 201
        assert [rule["day_of_week"] for rule in response.json()] == [MONDAY, WEDNESDAY]

    def test_malformed_payload_is_invalid_roster_entry(self, client, instructor):
        response = client.post(
            BASE_URL, json=rule_payload(instructor.id, day_of_week=9), headers=ADMIN_HEADERS
        )

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Invalid roster entry"
        assert body["code"] == "VALIDATION_FAILED"

    def test_end_before_start(self, client, instructor):
        response = client.post(
            BASE_URL,
            json=rule_payload(instructor.id, start_time="12:00", end_time="09:00"),
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "END_BEFORE_START"
        assert response.json()["detail"] == "End time must be after start time"

    def test_overlap_is_409_with_days(self, client, instructor, make_rule):
        make_rule(instructor.id, MONDAY, time(9), time(12), date(2024, 1, 1))

        response = client.post(
            BASE_URL,
            json=rule_payload(instructor.id, start_time="11:00", end_time="13:00"),
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "ROSTER_CONFLICT"
        assert body["detail"] == "This roster overlaps an existing shift on Monday."
        assert body["errors"] == {"days": [MONDAY]}

    def test_unknown_instructor(self, client, instructor):
        response = client.post(
            BASE_URL,
            json=rule_payload(generate_ulid()),
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Instructor not found"

    def test_missing_identity_is_401(self, client, instructor):
        response = client.post(BASE_URL, json=rule_payload(instructor.id))
        assert response.status_code == 401

    def test_missing_tenant_is_401(self, client, instructor):
        headers = {"X-User-ID": "user-admin", "X-User-Role": "admin"}
        response = client.post(BASE_URL, json=rule_payload(instructor.id), headers=headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing tenant context"

    def test_student_is_403(self, client, instructor):
        response = client.post(BASE_URL, json=rule_payload(instructor.id), headers=STUDENT_HEADERS)
        assert response.status_code == 403

    def test_storage_failure_hides_driver_text(self, client, instructor, monkeypatch):
        def broken_insert(self, **fields):
            raise RepositoryException("could not write block 42 of relation roster_rules")

        monkeypatch.setattr(RosterRuleRepository, "insert", broken_insert)

        response = client.post(BASE_URL, json=rule_payload(instructor.id), headers=ADMIN_HEADERS)

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == "Failed to create roster entry"
        assert body["code"] == "PERSISTENCE_FAILED"
        assert "errors" not in body
        assert "block 42" not in response.text


class TestConflictPreview:
    def test_no_conflicts(self, client, instructor):
        payload = rule_payload(instructor.id, day_of_week=None, days_of_week=[MONDAY])
        payload.pop("day_of_week")

        response = client.post(f"{BASE_URL}/conflicts", json=payload, headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"ok": True, "conflicting_days": []}

    def test_conflicts_name_the_days(self, client, instructor, make_rule):
        make_rule(instructor.id, WEDNESDAY, time(10), time(11), date(2024, 1, 1))
        payload = rule_payload(instructor.id, days_of_week=[MONDAY, WEDNESDAY])
        payload.pop("day_of_week")

        response = client.post(f"{BASE_URL}/conflicts", json=payload, headers=ADMIN_HEADERS)

        assert response.status_code == 409
        assert response.json()["errors"] == {"days": [WEDNESDAY]}


class TestRuleLifecycleRoutes:
    def test_update_and_void(self, client, instructor, make_rule):
        rule = make_rule(instructor.id, MONDAY, time(9), time(12), date(2024, 1, 1))

        updated = client.put(
            f"{BASE_URL}/{rule.id}",
            json=rule_payload(instructor.id, end_time="13:00", notes="extended"),
            headers=ADMIN_HEADERS,
        )
        assert updated.status_code == 200
        assert updated.json()["end_time"] == "13:00:00"
        assert updated.json()["notes"] == "extended"

        voided = client.delete(f"{BASE_URL}/{rule.id}", headers=ADMIN_HEADERS)
        assert voided.status_code == 200
        assert voided.json()["is_active"] is False
        assert voided.json()["voided_at"] is not None

        again = client.delete(f"{BASE_URL}/{rule.id}", headers=ADMIN_HEADERS)
        assert again.status_code == 200

    def test_unknown_rule_is_404(self, client, instructor):
        response = client.put(
            f"{BASE_URL}/{generate_ulid()}",
            json=rule_payload(instructor.id),
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Roster entry not found"

    def test_exact_key_conflict_is_409(self, client, instructor, make_rule):
        make_rule(
            instructor.id, MONDAY, time(9), time(12), date(2024, 12, 1), date(2024, 12, 1), voided=True
        )

        response = client.post(BASE_URL, json=rule_payload(instructor.id), headers=ADMIN_HEADERS)

        assert response.status_code == 409
        assert response.json()["code"] == "ROSTER_EXACT_KEY_CONFLICT"

    def test_list_and_get(self, client, instructor, make_rule):
        rule = make_rule(instructor.id, MONDAY, time(9), time(12), date(2024, 1, 1))

        listed = client.get(BASE_URL, headers=STUDENT_HEADERS)
        assert listed.status_code == 200
        assert [item["id"] for item in listed.json()] == [rule.id]

        fetched = client.get(f"{BASE_URL}/{rule.id}", headers=ADMIN_HEADERS)
        assert fetched.status_code == 200
        assert fetched.json()["effective_from"] == "2024-01-01"


def test_timeline_route(client, instructor, make_rule):
    make_rule(instructor.id, MONDAY, time(9), time(11), date(2024, 1, 1))

    response = client.get(f"{BASE_URL}/timeline", params={"date": "2024-06-03"}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["day_of_week"] == MONDAY
    assert len(body["slots"]) == 16
    assert body["instructors"][0]["display_name"] == "Amelia Earhart"
    block = body["instructors"][0]["blocks"][0]
    assert block["left_percent"] == 0
    assert block["width_percent"] == 25


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
