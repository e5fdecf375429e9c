from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of account roles; gates ask for capabilities, not names."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @property
    def can_mark_attendance(self) -> bool:
        return self is Role.STUDENT

    @property
    def can_enroll(self) -> bool:
        return self is Role.STUDENT

    @property
    def can_manage_sessions(self) -> bool:
        return self in (Role.TEACHER, Role.ADMIN)

    @property
    def can_manage_any_class(self) -> bool:
        return self is Role.ADMIN

    @property
    def can_view_reports(self) -> bool:
        return self in (Role.TEACHER, Role.ADMIN)


class ErrorKind(str, Enum):
    """Stable identifiers for rejected operations."""

    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_INACTIVE = "SESSION_INACTIVE"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    INACTIVE_STUDENT = "INACTIVE_STUDENT"
    ROLE_NOT_PERMITTED = "ROLE_NOT_PERMITTED"
    NOT_ENROLLED = "NOT_ENROLLED"
    DUPLICATE_ATTENDANCE = "DUPLICATE_ATTENDANCE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    CLASS_NOT_FOUND = "CLASS_NOT_FOUND"
    INVALID_LOCATION = "INVALID_LOCATION"
    INVALID_SUBMISSION = "INVALID_SUBMISSION"
    EXPIRED_SESSION = "EXPIRED_SESSION"
    INVALID_SESSION_STATE = "INVALID_SESSION_STATE"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    INVALID_CHECKIN_CODE = "INVALID_CHECKIN_CODE"
    CLASS_LOCATION_NOT_CONFIGURED = "CLASS_LOCATION_NOT_CONFIGURED"
