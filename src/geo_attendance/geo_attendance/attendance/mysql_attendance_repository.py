from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import DuplicateAttendanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord, StudentLocation
from .repository import AttendanceRepository

_COLUMNS = "ar.record_id, ar.session_id, ar.student_id, ar.student_lat, ar.student_lng, ar.marked_at, ar.created_at"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        student_location=StudentLocation(lat=float(r["student_lat"]), lng=float(r["student_lng"])),
        marked_at=r["marked_at"],
        created_at=r["created_at"],
    )


def _marked_at_clauses(start: Optional[datetime], end: Optional[datetime]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start is not None:
        clauses.append("ar.marked_at >= %s")
        params.append(start)
    if end is not None:
        clauses.append("ar.marked_at < %s")
        params.append(end)
    return clauses, params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, session_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM attendance_records WHERE session_id=%s AND student_id=%s",
                (int(session_id), int(student_id)),
            )
            return fetchone(cur) is not None

    def create(
        self,
        *,
        session_id: int,
        student_id: int,
        student_location: StudentLocation,
        marked_at: datetime,
        created_at: datetime,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(session_id, student_id, student_lat, student_lng, marked_at, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(session_id),
                        int(student_id),
                        float(student_location.lat),
                        float(student_location.lng),
                        marked_at,
                        created_at,
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e, "uq_records_session_student"):
                    raise DuplicateAttendanceError() from e
                raise

            return AttendanceRecord(
                record_id=int(cur.lastrowid),
                session_id=int(session_id),
                student_id=int(student_id),
                student_location=student_location,
                marked_at=marked_at,
                created_at=created_at,
            )

    def list_for_student(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses, params = _marked_at_clauses(start, end)
        clauses.insert(0, "ar.student_id=%s")
        params.insert(0, int(student_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.marked_at DESC, ar.record_id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.session_id=%s
                ORDER BY ar.marked_at ASC, ar.record_id ASC
                """,
                (int(session_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_class(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses, params = _marked_at_clauses(start, end)
        clauses.insert(0, "s.class_id=%s")
        params.insert(0, int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                JOIN attendance_sessions s ON s.session_id = ar.session_id
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.marked_at DESC, ar.record_id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
