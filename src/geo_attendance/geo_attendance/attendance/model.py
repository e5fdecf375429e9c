from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_MAX_DISTANCE_METERS
from ..core.enums import ErrorKind
from ..core.exceptions import AttendanceError, OutOfRangeError


@dataclass(frozen=True)
class StudentLocation:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one accepted check-in. Never mutated after insert."""

    record_id: int
    session_id: int
    student_id: int
    student_location: StudentLocation
    marked_at: datetime
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "sessionId": self.session_id,
            "studentId": self.student_id,
            "studentLocation": self.student_location.to_dict(),
            "markedAt": self.marked_at.isoformat(),
        }


@dataclass(frozen=True)
class AttendanceSubmission:
    """A student's claim to be present; references the session by token or id."""

    student_id: int
    student_location: StudentLocation
    session_token: Optional[str] = None
    session_id: Optional[int] = None
    max_distance_meters: float = DEFAULT_MAX_DISTANCE_METERS


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    record: Optional[AttendanceRecord] = None
    distance: Optional[float] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def accepted(cls, record: Optional[AttendanceRecord], distance: Optional[float], message: str) -> "SubmissionResult":
        return cls(success=True, record=record, distance=distance, message=message)

    @classmethod
    def rejected(cls, error: AttendanceError) -> "SubmissionResult":
        distance = error.distance if isinstance(error, OutOfRangeError) else None
        return cls(success=False, distance=distance, error_kind=error.kind, message=error.message)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "record": self.record.to_dict() if self.record else None,
            "distance": round(self.distance) if self.distance is not None else None,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }
