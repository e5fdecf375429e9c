from __future__ import annotations

from datetime import datetime
from typing import Optional

import mysql.connector

from ..core.exceptions import ClassNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_duplicate_key
from .model import AttendanceSession
from .repository import ActiveSessionConflictError, SessionRepository, TokenCollisionError

_SESSION_COLUMNS = "session_id, class_id, session_token, expires_at, is_active, created_at"


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        session_token=r["session_token"],
        expires_at=r["expires_at"],
        is_active=bool(r["is_active"]),
        created_at=r["created_at"],
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_for_class(
        self,
        *,
        class_id: int,
        session_token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> AttendanceSession:
        with db_cursor(self._conn_factory) as (_, cur):
            # The class row lock serializes concurrent creators for one class.
            cur.execute("SELECT class_id FROM classes WHERE class_id=%s FOR UPDATE", (int(class_id),))
            if not fetchone(cur):
                raise ClassNotFoundError()

            cur.execute(
                "UPDATE attendance_sessions SET is_active=0 WHERE class_id=%s AND is_active=1",
                (int(class_id),),
            )
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_sessions(class_id, session_token, expires_at, is_active, created_at)
                    VALUES(%s,%s,%s,1,%s)
                    """,
                    (int(class_id), session_token, expires_at, created_at),
                )
            except mysql.connector.IntegrityError as e:
                if is_duplicate_key(e, "uq_sessions_token"):
                    raise TokenCollisionError(session_token[:8]) from e
                if is_duplicate_key(e, "uq_sessions_active_class"):
                    raise ActiveSessionConflictError(str(class_id)) from e
                raise

            return AttendanceSession(
                session_id=int(cur.lastrowid),
                class_id=int(class_id),
                session_token=session_token,
                expires_at=expires_at,
                is_active=True,
                created_at=created_at,
            )

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_by_token(self, session_token: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_token=%s", (session_token,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_valid_by_token(self, session_token: str, *, now: datetime) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE session_token=%s AND is_active=1 AND expires_at >= %s
                """,
                (session_token, now),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_active_for_class(self, class_id: int, *, now: datetime) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE class_id=%s AND is_active=1 AND expires_at >= %s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(class_id), now),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def extend(self, session_id: int, *, minutes: float, now: datetime) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET expires_at = expires_at + INTERVAL %s SECOND
                WHERE session_id=%s AND is_active=1 AND expires_at >= %s
                """,
                (int(round(float(minutes) * 60)), int(session_id), now),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def deactivate(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE attendance_sessions SET is_active=0 WHERE session_id=%s", (int(session_id),))
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def deactivate_expired(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET is_active=0 WHERE is_active=1 AND expires_at < %s",
                (now,),
            )
            return int(cur.rowcount)

    def count_for_class(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        clauses = ["class_id=%s"]
        params: list[object] = [int(class_id)]
        if start is not None:
            clauses.append("created_at >= %s")
            params.append(start)
        if end is not None:
            clauses.append("created_at < %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS n FROM attendance_sessions WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
