from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, now_utc
from ..common.logging_setup import mask_token
from ..core.constants import SUSPICIOUS_DISTANCE_METERS
from ..core.exceptions import (
    AttendanceError,
    ClassNotFoundError,
    DuplicateAttendanceError,
    InactiveStudentError,
    InvalidSubmissionError,
    NotEnrolledError,
    OutOfRangeError,
    RoleNotPermittedError,
    SessionExpiredError,
    SessionInactiveError,
    SessionNotFoundError,
    StudentNotFoundError,
)
from ..enrollments.service import EnrollmentService
from ..geo.distance import distance_meters, is_within, validate_coordinates
from ..sessions.model import AttendanceSession
from ..sessions.service import SessionService
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceSubmission, StudentLocation, SubmissionResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Validation pipeline for attendance submissions.

    Checks run in a fixed order and stop at the first failure, so the error a
    student sees is always the earliest one that applies:

    1. session exists          5. active enrollment
    2. session active          6. no record yet
    3. session not expired     7. inside the geofence
    4. student usable          8. insert (storage enforces uniqueness)

    Rejections come back as a failed SubmissionResult. Infrastructure errors
    are raised to the caller untouched.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionService,
        enrollments: EnrollmentService,
        users: UserRepository,
        classes: ClassRepository,
        *,
        clock: Optional[Clock] = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._enrollments = enrollments
        self._users = users
        self._classes = classes
        self._clock = clock or now_utc

    def submit(self, submission: AttendanceSubmission) -> SubmissionResult:
        try:
            record, distance = self._run_pipeline(submission)
        except AttendanceError as e:
            self._log_rejection(submission, e)
            return SubmissionResult.rejected(e)

        logger.info(
            "Attendance accepted record=%s session=%s student=%s distance=%.1fm",
            record.record_id,
            record.session_id,
            record.student_id,
            distance,
        )
        return SubmissionResult.accepted(record, distance, "Attendance marked successfully")

    def check_eligibility(
        self,
        *,
        student_id: int,
        session_token: Optional[str] = None,
        session_id: Optional[int] = None,
    ) -> SubmissionResult:
        """Run steps 1-6 without a location and without writing anything."""

        try:
            session = self._resolve_session(session_token, session_id)
            self._check_session_state(session, self._clock())
            self._check_student(student_id)
            self._check_enrollment(student_id, session)
            self._check_not_marked(session, student_id)
        except AttendanceError as e:
            return SubmissionResult.rejected(e)
        return SubmissionResult.accepted(None, None, "Eligible to mark attendance")

    def _run_pipeline(self, submission: AttendanceSubmission) -> tuple[AttendanceRecord, float]:
        location, max_distance = self._validate_input(submission)
        now = self._clock()

        session = self._resolve_session(submission.session_token, submission.session_id)
        self._check_session_state(session, now)
        self._check_student(submission.student_id)
        self._check_enrollment(submission.student_id, session)
        self._check_not_marked(session, submission.student_id)
        distance = self._check_distance(session, location, max_distance)

        record = self._attendance.create(
            session_id=session.session_id,
            student_id=submission.student_id,
            student_location=location,
            marked_at=now,
            created_at=now,
        )
        return record, distance

    def _validate_input(self, submission: AttendanceSubmission) -> tuple[StudentLocation, float]:
        if not submission.session_token and submission.session_id is None:
            raise InvalidSubmissionError("Session token is required")
        if submission.student_id is None:
            raise InvalidSubmissionError("Student ID is required")
        if submission.student_location is None:
            raise InvalidSubmissionError("Student location is required")

        lat, lng = validate_coordinates(submission.student_location.lat, submission.student_location.lng)

        try:
            max_distance = float(submission.max_distance_meters)
        except (TypeError, ValueError):
            raise InvalidSubmissionError("Maximum distance must be a number") from None
        if not math.isfinite(max_distance) or max_distance <= 0:
            raise InvalidSubmissionError("Maximum distance must be greater than zero")

        return StudentLocation(lat=lat, lng=lng), max_distance

    def _resolve_session(self, session_token: Optional[str], session_id: Optional[int]) -> AttendanceSession:
        if session_id is not None:
            session = self._sessions.get(session_id)
        else:
            session = self._sessions.find_by_token(session_token or "")
        if session is None:
            raise SessionNotFoundError()
        return session

    @staticmethod
    def _check_session_state(session: AttendanceSession, now: datetime) -> None:
        if not session.is_active:
            raise SessionInactiveError()
        if session.is_expired(now):
            raise SessionExpiredError()

    def _check_student(self, student_id: int) -> None:
        student = self._users.get_by_id(student_id)
        if not student:
            raise StudentNotFoundError()
        if not student.role.can_mark_attendance:
            raise RoleNotPermittedError("Only students can mark attendance")
        if not student.is_active:
            raise InactiveStudentError()

    def _check_enrollment(self, student_id: int, session: AttendanceSession) -> None:
        if not self._enrollments.is_enrolled(student_id, session.class_id):
            raise NotEnrolledError()

    def _check_not_marked(self, session: AttendanceSession, student_id: int) -> None:
        if self._attendance.exists(session.session_id, student_id):
            raise DuplicateAttendanceError()

    def _check_distance(self, session: AttendanceSession, location: StudentLocation, max_distance: float) -> float:
        class_info = self._classes.get_by_id(session.class_id)
        if class_info is None:
            raise ClassNotFoundError()
        if class_info.location is None:
            raise ClassNotFoundError("Class location is not configured")

        distance = distance_meters(
            location.lat,
            location.lng,
            class_info.location.latitude,
            class_info.location.longitude,
        )
        if not is_within(distance, max_distance):
            raise OutOfRangeError(distance, max_distance)
        return distance

    def _log_rejection(self, submission: AttendanceSubmission, error: AttendanceError) -> None:
        ref = submission.session_id if submission.session_id is not None else mask_token(submission.session_token)
        logger.warning(
            "Attendance rejected kind=%s session=%s student=%s",
            error.kind.value,
            ref,
            submission.student_id,
        )
        if isinstance(error, OutOfRangeError) and error.distance > SUSPICIOUS_DISTANCE_METERS:
            logger.warning(
                "Possible location spoofing student=%s distance=%.0fm max=%.0fm",
                submission.student_id,
                error.distance,
                error.max_distance,
            )
