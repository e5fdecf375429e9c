from __future__ import annotations

import pytest

from fakes import CLASS_ID, CLASSROOM, NO_LOCATION_CLASS_ID, OTHER_STUDENT_ID, STUDENT_ID, TEACHER_ID
from src.geo_attendance.geo_attendance.main import create_app


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(world.container)
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as s:
        s["user_id"] = user_id
        s["role"] = role


def _open_session(client) -> str:
    _login(client, TEACHER_ID, "teacher")
    resp = client.post(f"/api/classes/{CLASS_ID}/sessions", json={"durationMinutes": 15})
    assert resp.status_code == 201
    return resp.get_json()["checkIn"]["sessionToken"]


def test_requires_login(client):
    resp = client.post("/api/attendance", json={})
    assert resp.status_code == 401


def test_student_cannot_open_sessions(client):
    _login(client, STUDENT_ID, "student")
    resp = client.post(f"/api/classes/{CLASS_ID}/sessions", json={})
    assert resp.status_code == 403


def test_session_duration_bounds(client):
    _login(client, TEACHER_ID, "teacher")
    resp = client.post(f"/api/classes/{CLASS_ID}/sessions", json={"durationMinutes": 500})
    assert resp.status_code == 400


def test_mark_attendance_flow(client):
    token = _open_session(client)

    _login(client, STUDENT_ID, "student")
    body = {"sessionToken": token, "lat": CLASSROOM.latitude, "lng": CLASSROOM.longitude}
    first = client.post("/api/attendance", json=body)
    assert first.status_code == 201
    assert first.get_json()["success"] is True

    again = client.post("/api/attendance", json=body)
    assert again.status_code == 409
    assert again.get_json()["errorKind"] == "DUPLICATE_ATTENDANCE"


def test_out_of_range_is_422(client):
    token = _open_session(client)

    _login(client, STUDENT_ID, "student")
    resp = client.post(
        "/api/attendance",
        json={"code": token, "studentLocation": {"lat": CLASSROOM.latitude + 0.01, "lng": CLASSROOM.longitude}},
    )
    assert resp.status_code == 422
    assert resp.get_json()["errorKind"] == "OUT_OF_RANGE"


def test_not_enrolled_is_403(client):
    token = _open_session(client)

    _login(client, OTHER_STUDENT_ID, "student")
    resp = client.post("/api/attendance", json={"code": token, "lat": CLASSROOM.latitude, "lng": CLASSROOM.longitude})
    assert resp.status_code == 403
    assert resp.get_json()["errorKind"] == "NOT_ENROLLED"


def test_enroll_via_api(client):
    _login(client, OTHER_STUDENT_ID, "student")
    assert client.post("/api/enrollments", json={"classId": CLASS_ID}).status_code == 201
    assert client.get(f"/api/enrollments/{CLASS_ID}/status").get_json()["enrolled"] is True
    assert client.post("/api/enrollments", json={"classId": CLASS_ID}).status_code == 409


def test_unknown_session_token_is_404(client):
    _login(client, STUDENT_ID, "student")
    assert client.get("/api/sessions/" + "0" * 64).status_code == 404


def test_student_cannot_read_someone_elses_history(client):
    _login(client, STUDENT_ID, "student")
    assert client.get(f"/api/stats/students/{STUDENT_ID}").status_code == 200
    assert client.get(f"/api/stats/students/{OTHER_STUDENT_ID}").status_code == 403


def test_class_summary(client):
    token = _open_session(client)
    _login(client, STUDENT_ID, "student")
    client.post("/api/attendance", json={"code": token, "lat": CLASSROOM.latitude, "lng": CLASSROOM.longitude})

    _login(client, TEACHER_ID, "teacher")
    data = client.get(f"/api/stats/classes/{CLASS_ID}/summary").get_json()
    assert data["totalSessions"] == 1
    assert data["totalRecords"] == 1
    assert data["students"][0]["studentId"] == STUDENT_ID


def test_client_cannot_widen_the_geofence(client):
    token = _open_session(client)

    _login(client, STUDENT_ID, "student")
    resp = client.post(
        "/api/attendance",
        json={"code": token, "lat": 34.0522, "lng": -118.2437, "maxDistanceMeters": 1e9},
    )
    assert resp.status_code == 422
    assert resp.get_json()["errorKind"] == "OUT_OF_RANGE"


def test_other_teacher_cannot_manage_sessions(client):
    _open_session(client)
    session_id = client.get(f"/api/classes/{CLASS_ID}/sessions/active").get_json()["session"]["sessionId"]

    _login(client, 99, "teacher")
    assert client.post(f"/api/classes/{CLASS_ID}/sessions", json={}).status_code == 403
    assert client.get(f"/api/classes/{CLASS_ID}/sessions/active").status_code == 403
    assert client.post(f"/api/sessions/{session_id}/extend", json={"minutes": 10}).status_code == 403
    assert client.post(f"/api/sessions/{session_id}/deactivate").status_code == 403
    assert client.post(f"/api/classes/{CLASS_ID}/students/{STUDENT_ID}/deactivate").status_code == 403


def test_admin_can_manage_any_class(client):
    _login(client, 1234, "admin")
    assert client.post(f"/api/classes/{CLASS_ID}/sessions", json={}).status_code == 201


def test_session_for_class_without_location_is_refused(client):
    _login(client, TEACHER_ID, "teacher")
    resp = client.post(f"/api/classes/{NO_LOCATION_CLASS_ID}/sessions", json={})
    assert resp.status_code == 409
    assert resp.get_json()["errorKind"] == "CLASS_LOCATION_NOT_CONFIGURED"
