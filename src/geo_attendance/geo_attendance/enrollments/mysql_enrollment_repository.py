from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Enrollment
from .repository import EnrollmentRepository

_COLUMNS = "enrollment_id, student_id, class_id, is_active, enrolled_at"


def _to_enrollment(r: dict) -> Enrollment:
    return Enrollment(
        enrollment_id=int(r["enrollment_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        is_active=bool(r["is_active"]),
        enrolled_at=r["enrolled_at"],
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, student_id: int, class_id: int) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM enrollments WHERE student_id=%s AND class_id=%s",
                (int(student_id), int(class_id)),
            )
            r = fetchone(cur)
            return _to_enrollment(r) if r else None

    def is_active(self, student_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM enrollments WHERE student_id=%s AND class_id=%s AND is_active=1",
                (int(student_id), int(class_id)),
            )
            return fetchone(cur) is not None

    def create(self, *, student_id: int, class_id: int, enrolled_at: datetime) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO enrollments(student_id, class_id, is_active, enrolled_at)
                    VALUES(%s,%s,1,%s)
                    """,
                    (int(student_id), int(class_id), enrolled_at),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e, "uq_enrollments_student_class"):
                    return None
                raise
            return Enrollment(
                enrollment_id=int(cur.lastrowid),
                student_id=int(student_id),
                class_id=int(class_id),
                is_active=True,
                enrolled_at=enrolled_at,
            )

    def set_active(self, student_id: int, class_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE enrollments
                SET is_active=%s
                WHERE student_id=%s AND class_id=%s AND is_active=%s
                """,
                (1 if is_active else 0, int(student_id), int(class_id), 0 if is_active else 1),
            )
            return cur.rowcount > 0

    def _count(self, column: str, value: int, include_inactive: bool) -> int:
        where = f"{column}=%s" if include_inactive else f"{column}=%s AND is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM enrollments WHERE {where}", (int(value),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_for_class(self, class_id: int, *, include_inactive: bool = False) -> int:
        return self._count("class_id", class_id, include_inactive)

    def count_for_student(self, student_id: int, *, include_inactive: bool = False) -> int:
        return self._count("student_id", student_id, include_inactive)

    def _list(self, column: str, value: int, include_inactive: bool) -> Sequence[Enrollment]:
        where = f"{column}=%s" if include_inactive else f"{column}=%s AND is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM enrollments WHERE {where} ORDER BY enrolled_at ASC",
                (int(value),),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def list_for_class(self, class_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        return self._list("class_id", class_id, include_inactive)

    def list_for_student(self, student_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        return self._list("student_id", student_id, include_inactive)
