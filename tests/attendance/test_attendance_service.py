from __future__ import annotations

import threading
from dataclasses import replace

import pytest

from fakes import (
    CLASS_ID,
    CLASSROOM,
    INACTIVE_STUDENT_ID,
    OTHER_STUDENT_ID,
    STUDENT_ID,
    TEACHER_ID,
    InMemoryAttendance,
)
from src.geo_attendance.geo_attendance.attendance.model import AttendanceSubmission, StudentLocation
from src.geo_attendance.geo_attendance.classes.model import ClassInfo, ClassLocation
from src.geo_attendance.geo_attendance.core.enums import ErrorKind
from src.geo_attendance.geo_attendance.core.exceptions import StorageTimeoutError

AT_CLASS = StudentLocation(CLASSROOM.latitude, CLASSROOM.longitude)
# ~111 m north of the classroom
FAR_AWAY = StudentLocation(CLASSROOM.latitude + 0.001, CLASSROOM.longitude)


def _submit(world, token, *, student_id=STUDENT_ID, location=AT_CLASS, **kwargs):
    return world.container.attendance_service.submit(
        AttendanceSubmission(student_id=student_id, student_location=location, session_token=token, **kwargs)
    )


@pytest.fixture
def session(world):
    return world.container.session_service.create_for_class(CLASS_ID)


def test_accepts_student_in_range(world, session):
    result = _submit(world, session.session_token)

    assert result.success
    assert result.error_kind is None
    assert result.distance == pytest.approx(0.0, abs=1e-6)
    assert result.record.session_id == session.session_id
    assert result.record.marked_at == world.clock()
    assert world.attendance.exists(session.session_id, STUDENT_ID)


def test_accepts_by_session_id(world, session):
    result = world.container.attendance_service.submit(
        AttendanceSubmission(student_id=STUDENT_ID, student_location=AT_CLASS, session_id=session.session_id)
    )
    assert result.success


def test_second_submission_is_duplicate(world, session):
    assert _submit(world, session.session_token).success

    result = _submit(world, session.session_token)

    assert not result.success
    assert result.error_kind is ErrorKind.DUPLICATE_ATTENDANCE


def test_out_of_range_reports_distance(world, session):
    result = _submit(world, session.session_token, location=FAR_AWAY)

    assert result.error_kind is ErrorKind.OUT_OF_RANGE
    assert 100 < result.distance < 125
    assert "111m away" in result.message
    assert not world.attendance.exists(session.session_id, STUDENT_ID)


def test_custom_max_distance(world, session):
    result = _submit(world, session.session_token, location=FAR_AWAY, max_distance_meters=200)
    assert result.success


@pytest.mark.parametrize(
    "student_id,kind",
    [
        (999, ErrorKind.STUDENT_NOT_FOUND),
        (TEACHER_ID, ErrorKind.ROLE_NOT_PERMITTED),
        (INACTIVE_STUDENT_ID, ErrorKind.INACTIVE_STUDENT),
        (OTHER_STUDENT_ID, ErrorKind.NOT_ENROLLED),
    ],
)
def test_student_rejections(world, session, student_id, kind):
    assert _submit(world, session.session_token, student_id=student_id).error_kind is kind


def test_unknown_token(world, session):
    assert _submit(world, "0" * 64).error_kind is ErrorKind.SESSION_NOT_FOUND


def test_superseded_session_is_inactive(world, session):
    world.container.session_service.create_for_class(CLASS_ID)
    assert _submit(world, session.session_token).error_kind is ErrorKind.SESSION_INACTIVE


def test_expired_session(world, session):
    world.clock.advance(minutes=30, milliseconds=100)
    assert _submit(world, session.session_token).error_kind is ErrorKind.SESSION_EXPIRED


def test_expired_beats_out_of_range(world, session):
    world.clock.advance(hours=1)
    result = _submit(world, session.session_token, location=FAR_AWAY)
    assert result.error_kind is ErrorKind.SESSION_EXPIRED
    assert result.distance is None


def test_not_enrolled_beats_out_of_range(world, session):
    result = _submit(world, session.session_token, student_id=OTHER_STUDENT_ID, location=FAR_AWAY)
    assert result.error_kind is ErrorKind.NOT_ENROLLED


def test_enroll_after_rejection_then_succeed(world, session):
    assert _submit(world, session.session_token, student_id=OTHER_STUDENT_ID).error_kind is ErrorKind.NOT_ENROLLED

    world.container.enrollment_service.enroll(OTHER_STUDENT_ID, CLASS_ID)

    assert _submit(world, session.session_token, student_id=OTHER_STUDENT_ID).success


def test_deactivated_enrollment_is_not_enrolled(world, session):
    world.container.enrollment_service.deactivate(STUDENT_ID, CLASS_ID)
    assert _submit(world, session.session_token).error_kind is ErrorKind.NOT_ENROLLED


def test_class_location_removed_after_session_opened(world, session):
    world.classes.classes[CLASS_ID] = replace(world.classes.classes[CLASS_ID], location=None)
    assert _submit(world, session.session_token).error_kind is ErrorKind.CLASS_NOT_FOUND


@pytest.mark.parametrize(
    "location,kind",
    [
        (StudentLocation(91.0, 0.0), ErrorKind.INVALID_LOCATION),
        (StudentLocation(0.0, float("nan")), ErrorKind.INVALID_LOCATION),
        (None, ErrorKind.INVALID_SUBMISSION),
    ],
)
def test_malformed_input(world, session, location, kind):
    assert _submit(world, session.session_token, location=location).error_kind is kind


def test_missing_token(world, session):
    assert _submit(world, None).error_kind is ErrorKind.INVALID_SUBMISSION


def test_non_positive_max_distance(world, session):
    assert _submit(world, session.session_token, max_distance_meters=0).error_kind is ErrorKind.INVALID_SUBMISSION


def test_concurrent_submissions_store_one_record(world, session):
    n = 10
    barrier = threading.Barrier(n)
    results = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        r = _submit(world, session.session_token)
        with lock:
            results.append(r)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.success) == 1
    assert sum(1 for r in results if r.error_kind is ErrorKind.DUPLICATE_ATTENDANCE) == n - 1
    assert len(world.attendance.list_for_session(session.session_id)) == 1


class _TimingOutAttendance(InMemoryAttendance):
    def exists(self, session_id, student_id):
        raise StorageTimeoutError("lock wait timeout")


def test_infrastructure_errors_propagate(world, session):
    svc = world.rebuild(attendance_repo=_TimingOutAttendance(world.sessions)).attendance_service

    with pytest.raises(StorageTimeoutError) as exc:
        svc.submit(AttendanceSubmission(STUDENT_ID, AT_CLASS, session_token=session.session_token))
    assert exc.value.retryable


def test_check_eligibility(world, session):
    svc = world.container.attendance_service

    ok = svc.check_eligibility(student_id=STUDENT_ID, session_token=session.session_token)
    assert ok.success
    assert not world.attendance.exists(session.session_id, STUDENT_ID)

    _submit(world, session.session_token)
    again = svc.check_eligibility(student_id=STUDENT_ID, session_id=session.session_id)
    assert again.error_kind is ErrorKind.DUPLICATE_ATTENDANCE


def test_result_to_dict(world, session):
    data = _submit(world, session.session_token, location=FAR_AWAY).to_dict()
    assert data["success"] is False
    assert data["errorKind"] == "OUT_OF_RANGE"
    assert data["distance"] == 111
    assert data["record"] is None


@pytest.fixture
def new_york_session(world):
    world.classes.classes[300] = ClassInfo(300, "Urban Geography", "GEO210", TEACHER_ID, ClassLocation(40.7128, -74.0060))
    world.container.enrollment_service.enroll(STUDENT_ID, 300)
    return world.container.session_service.create_for_class(300)


def test_next_door_in_new_york_is_accepted(world, new_york_session):
    result = _submit(world, new_york_session.session_token, location=StudentLocation(40.7129, -74.0061))
    assert result.success
    assert result.distance < 50


def test_submitting_from_los_angeles_is_out_of_range(world, new_york_session):
    result = _submit(world, new_york_session.session_token, location=StudentLocation(34.0522, -118.2437))
    assert result.error_kind is ErrorKind.OUT_OF_RANGE
    assert result.distance > 3_900_000


def test_one_second_session_expires_after_1_1_seconds(world):
    s = world.container.session_service.create_for_class(CLASS_ID, 1 / 60)
    world.clock.advance(milliseconds=1100)

    assert _submit(world, s.session_token).error_kind is ErrorKind.SESSION_EXPIRED
