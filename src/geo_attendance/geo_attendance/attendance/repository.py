from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, StudentLocation


class AttendanceRepository(Protocol):
    def exists(self, session_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        session_id: int,
        student_id: int,
        student_location: StudentLocation,
        marked_at: datetime,
        created_at: datetime,
    ) -> AttendanceRecord:
        """Insert a record; raises DuplicateAttendanceError on the (session, student) constraint."""

        raise NotImplementedError

    def list_for_student(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
