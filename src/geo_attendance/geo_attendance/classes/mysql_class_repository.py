from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ClassInfo, ClassLocation
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, name, subject, teacher_id, location_lat, location_lng, location_label
                FROM classes
                WHERE class_id=%s
                """,
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            location = None
            if r.get("location_lat") is not None and r.get("location_lng") is not None:
                location = ClassLocation(
                    latitude=float(r["location_lat"]),
                    longitude=float(r["location_lng"]),
                    label=r.get("location_label") or "",
                )
            return ClassInfo(
                class_id=int(r["class_id"]),
                name=r["name"],
                subject=r.get("subject") or "",
                teacher_id=r.get("teacher_id"),
                location=location,
            )
