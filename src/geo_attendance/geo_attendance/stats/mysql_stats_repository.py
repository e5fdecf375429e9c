from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord, StudentLocation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ClassStatsRow, StudentHistoryRow
from .repository import StatsRepository


def _range_clauses(start: Optional[datetime], end: Optional[datetime]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append("ar.marked_at >= %s")
        params.append(start)
    if end is not None:
        clauses.append("ar.marked_at < %s")
        params.append(end)
    return clauses, params


class MySQLStatsRepository(StatsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def class_stats(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[ClassStatsRow]:
        clauses, params = _range_clauses(start, end)
        clauses.insert(0, "s.class_id=%s")
        params.insert(0, int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.student_id,
                    u.full_name AS student_name,
                    COUNT(*) AS attendance_count,
                    MIN(ar.marked_at) AS first_attendance,
                    MAX(ar.marked_at) AS last_attendance
                FROM attendance_records ar
                JOIN attendance_sessions s ON s.session_id = ar.session_id
                JOIN users u ON u.user_id = ar.student_id
                WHERE {' AND '.join(clauses)}
                GROUP BY ar.student_id, u.full_name
                ORDER BY attendance_count DESC, ar.student_id ASC
                """,
                tuple(params),
            )
            return [
                ClassStatsRow(
                    student_id=int(r["student_id"]),
                    student_name=r["student_name"],
                    attendance_count=int(r["attendance_count"]),
                    first_attendance=r.get("first_attendance"),
                    last_attendance=r.get("last_attendance"),
                )
                for r in fetchall(cur)
            ]

    def student_history(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[StudentHistoryRow]:
        clauses, params = _range_clauses(start, end)
        clauses.insert(0, "ar.student_id=%s")
        params.insert(0, int(student_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.record_id, ar.session_id, ar.student_id, ar.student_lat, ar.student_lng,
                    ar.marked_at, ar.created_at,
                    c.class_id, c.name AS class_name
                FROM attendance_records ar
                JOIN attendance_sessions s ON s.session_id = ar.session_id
                JOIN classes c ON c.class_id = s.class_id
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.marked_at DESC, ar.record_id DESC
                """,
                tuple(params),
            )
            return [
                StudentHistoryRow(
                    record=AttendanceRecord(
                        record_id=int(r["record_id"]),
                        session_id=int(r["session_id"]),
                        student_id=int(r["student_id"]),
                        student_location=StudentLocation(lat=float(r["student_lat"]), lng=float(r["student_lng"])),
                        marked_at=r["marked_at"],
                        created_at=r["created_at"],
                    ),
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                )
                for r in fetchall(cur)
            ]
