from __future__ import annotations

from typing import Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class AttendanceError(DomainError):
    """Base for rejections that carry a stable error kind.

    These are terminal for the attempt: callers must not retry them.
    """

    kind: ErrorKind
    default_message = "attendance operation rejected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class SessionNotFoundError(AttendanceError):
    kind = ErrorKind.SESSION_NOT_FOUND
    default_message = "Invalid check-in code. Please scan a valid attendance code."


class SessionInactiveError(AttendanceError):
    kind = ErrorKind.SESSION_INACTIVE
    default_message = "This attendance session is not active."


class SessionExpiredError(AttendanceError):
    kind = ErrorKind.SESSION_EXPIRED
    default_message = "This check-in code has expired. Please ask your teacher for a new one."


class StudentNotFoundError(AttendanceError):
    kind = ErrorKind.STUDENT_NOT_FOUND
    default_message = "Student account not found. Please sign out and sign in again."


class InactiveStudentError(AttendanceError):
    kind = ErrorKind.INACTIVE_STUDENT
    default_message = "Student account is inactive. Please sign in again or contact an administrator."


class RoleNotPermittedError(AttendanceError):
    kind = ErrorKind.ROLE_NOT_PERMITTED
    default_message = "This account role is not allowed to perform the operation."


class NotEnrolledError(AttendanceError):
    kind = ErrorKind.NOT_ENROLLED
    default_message = "You are not enrolled in this class. Enroll first or contact your instructor."


class DuplicateAttendanceError(AttendanceError):
    kind = ErrorKind.DUPLICATE_ATTENDANCE
    default_message = "You have already marked attendance for this session."


class OutOfRangeError(AttendanceError):
    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, distance: float, max_distance: float, message: Optional[str] = None):
        self.distance = distance
        self.max_distance = max_distance
        super().__init__(
            message
            or f"You are {round(distance)}m away from the classroom. "
            f"You must be within {round(max_distance)}m to mark attendance."
        )


class ClassNotFoundError(AttendanceError):
    kind = ErrorKind.CLASS_NOT_FOUND
    default_message = "Class not found."


class ClassLocationNotConfiguredError(AttendanceError):
    kind = ErrorKind.CLASS_LOCATION_NOT_CONFIGURED
    default_message = "Class location must be configured before creating attendance sessions."


class InvalidLocationError(AttendanceError):
    kind = ErrorKind.INVALID_LOCATION
    default_message = "Invalid location coordinates."


class InvalidSubmissionError(AttendanceError):
    kind = ErrorKind.INVALID_SUBMISSION
    default_message = "Attendance submission is incomplete."


class ExpiredSessionError(AttendanceError):
    """Raised by ``extend`` when the session can no longer be extended."""

    kind = ErrorKind.EXPIRED_SESSION
    default_message = "Cannot extend an expired or inactive session."


class InvalidSessionStateError(AttendanceError):
    kind = ErrorKind.INVALID_SESSION_STATE
    default_message = "Cannot generate check-in data for an invalid session."


class AlreadyEnrolledError(AttendanceError):
    kind = ErrorKind.ALREADY_ENROLLED
    default_message = "Student is already enrolled in this class."


class InvalidCheckInCodeError(AttendanceError):
    kind = ErrorKind.INVALID_CHECKIN_CODE
    default_message = "Check-in code could not be read."


class InfrastructureError(Exception):
    """Storage or transport failure; safe for the caller to retry."""

    retryable = True


class StorageUnavailableError(InfrastructureError):
    """The backing store could not be reached."""


class StorageTimeoutError(InfrastructureError):
    """The backing store did not answer within the configured bound."""
