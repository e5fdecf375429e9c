from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import AttendanceSession


class TokenCollisionError(Exception):
    """The generated token already exists; the caller should retry with a new one."""


class ActiveSessionConflictError(Exception):
    """Storage refused a second active session for the class."""


class SessionRepository(Protocol):
    def create_for_class(
        self,
        *,
        class_id: int,
        session_token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> AttendanceSession:
        """Deactivate every active session of the class and insert a new one, atomically."""

        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_token(self, session_token: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_valid_by_token(self, session_token: str, *, now: datetime) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_active_for_class(self, class_id: int, *, now: datetime) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def extend(self, session_id: int, *, minutes: float, now: datetime) -> Optional[AttendanceSession]:
        """Push ``expires_at`` only while the session is still valid; None otherwise."""

        raise NotImplementedError

    def deactivate(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def deactivate_expired(self, *, now: datetime) -> int:
        raise NotImplementedError

    def count_for_class(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        raise NotImplementedError
