from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord


@dataclass(frozen=True)
class ClassStatsRow:
    """Read-model: one student's attendance across all sessions of a class."""

    student_id: int
    student_name: str
    attendance_count: int
    first_attendance: Optional[datetime] = None
    last_attendance: Optional[datetime] = None


@dataclass(frozen=True)
class StudentHistoryRow:
    record: AttendanceRecord
    class_id: int
    class_name: str


@dataclass(frozen=True)
class ClassAttendanceRate:
    class_id: int
    total_sessions: int
    enrolled_students: int
    total_records: int
    attendance_rate: int


@dataclass(frozen=True)
class StudentSummary:
    student_id: int
    total_attendance: int
    unique_classes: int
    by_month: dict[str, int] = field(default_factory=dict)
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None
