from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_date_range
from ..enrollments.repository import EnrollmentRepository
from ..sessions.repository import SessionRepository
from .model import ClassAttendanceRate, ClassStatsRow, StudentSummary
from .repository import StatsRepository


class StatsService:
    """Read-only rollups over attendance records.

    Date filters are half-open ``[start, end)`` on ``marked_at``. Storage
    failures propagate to the caller.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        stats: StatsRepository,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
    ):
        self._attendance = attendance
        self._stats = stats
        self._sessions = sessions
        self._enrollments = enrollments

    def by_student(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        require_date_range(start, end)
        return self._attendance.list_for_student(student_id, start=start, end=end)

    def by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_session(session_id)

    def by_class(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        require_date_range(start, end)
        return self._attendance.list_for_class(class_id, start=start, end=end)

    def class_stats(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[ClassStatsRow]:
        require_date_range(start, end)
        return self._stats.class_stats(class_id, start=start, end=end)

    def class_attendance_rate(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ClassAttendanceRate:
        """Share of expected check-ins (enrolled students x sessions) that happened, in percent."""

        require_date_range(start, end)
        total_sessions = self._sessions.count_for_class(class_id, start=start, end=end)
        enrolled = self._enrollments.count_for_class(class_id)
        total_records = len(self._attendance.list_for_class(class_id, start=start, end=end))

        expected = enrolled * total_sessions
        rate = round(total_records / expected * 100) if expected > 0 else 0
        return ClassAttendanceRate(
            class_id=class_id,
            total_sessions=total_sessions,
            enrolled_students=enrolled,
            total_records=total_records,
            attendance_rate=rate,
        )

    def student_summary(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> StudentSummary:
        require_date_range(start, end)
        rows = self._stats.student_history(student_id, start=start, end=end)

        by_month: dict[str, int] = {}
        for row in rows:
            month = row.record.marked_at.strftime("%Y-%m")
            by_month[month] = by_month.get(month, 0) + 1

        marked = [row.record.marked_at for row in rows]
        return StudentSummary(
            student_id=student_id,
            total_attendance=len(rows),
            unique_classes=len({row.class_id for row in rows}),
            by_month=by_month,
            earliest=min(marked) if marked else None,
            latest=max(marked) if marked else None,
        )
