from __future__ import annotations

import logging
from typing import Optional, Union

from ..classes.model import ClassInfo
from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, minutes, now_utc
from ..common.logging_setup import mask_token
from ..common.validators import require_positive
from ..core.constants import DEFAULT_EXTEND_MINUTES, DEFAULT_SESSION_MINUTES, TOKEN_RETRY_ATTEMPTS
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ClassLocationNotConfiguredError,
    ClassNotFoundError,
    ExpiredSessionError,
    InvalidSessionStateError,
    SessionNotFoundError,
    StorageUnavailableError,
)
from .model import AttendanceSession, CheckInPayload, SessionSummary
from .repository import ActiveSessionConflictError, SessionRepository, TokenCollisionError
from .tokens import HexTokenGenerator, TokenGenerator

logger = logging.getLogger(__name__)


class SessionService:
    """Use cases around the attendance session lifecycle.

    The single-active-session invariant is owned by the repository's atomic
    ``create_for_class``; this service never reads-then-writes it.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        token_generator: Optional[TokenGenerator] = None,
        clock: Optional[Clock] = None,
        default_minutes: float = DEFAULT_SESSION_MINUTES,
        max_token_attempts: int = TOKEN_RETRY_ATTEMPTS,
    ):
        self._sessions = sessions
        self._classes = classes
        self._new_token = token_generator or HexTokenGenerator()
        self._clock = clock or now_utc
        self._default_minutes = float(default_minutes)
        self._max_token_attempts = max(1, int(max_token_attempts))

    @property
    def default_minutes(self) -> float:
        return self._default_minutes

    def now(self):
        return self._clock()

    def create_for_class(self, class_id: int, duration_minutes: Optional[float] = None) -> AttendanceSession:
        duration = require_positive(
            self._default_minutes if duration_minutes is None else duration_minutes,
            "duration_minutes",
        )
        class_info = self._classes.get_by_id(class_id)
        if class_info is None:
            raise ClassNotFoundError()
        if class_info.location is None:
            raise ClassLocationNotConfiguredError()

        last_cause = ""
        for attempt in range(1, self._max_token_attempts + 1):
            created_at = self._clock()
            token = self._new_token()
            try:
                session = self._sessions.create_for_class(
                    class_id=class_id,
                    session_token=token,
                    expires_at=created_at + minutes(duration),
                    created_at=created_at,
                )
            except TokenCollisionError:
                logger.warning("Session token collision for class %s (attempt %d)", class_id, attempt)
                last_cause = "session token collision"
                continue
            except ActiveSessionConflictError:
                logger.warning("Concurrent session creation for class %s (attempt %d)", class_id, attempt)
                last_cause = "another session was created concurrently"
                continue

            logger.info(
                "Created session %s for class %s token=%s expires_at=%s",
                session.session_id,
                class_id,
                mask_token(session.session_token),
                session.expires_at.isoformat(),
            )
            return session

        raise StorageUnavailableError(
            f"Could not create a session for class {class_id} after {self._max_token_attempts} attempts "
            f"(last failure: {last_cause})"
        )

    def ensure_can_manage(self, class_id: int, *, user_id: int, role: Role) -> ClassInfo:
        """Teachers manage sessions of their own classes only; admins manage any class."""

        class_info = self._classes.get_by_id(class_id)
        if class_info is None:
            raise ClassNotFoundError()
        if not role.can_manage_sessions:
            raise AuthorizationError("Your account role cannot manage attendance sessions")
        if not role.can_manage_any_class and class_info.teacher_id != user_id:
            raise AuthorizationError("You can only manage sessions for your own classes")
        return class_info

    def get(self, session_id: int) -> Optional[AttendanceSession]:
        return self._sessions.get_by_id(session_id)

    def find_by_token(self, session_token: str) -> Optional[AttendanceSession]:
        if not session_token:
            return None
        return self._sessions.get_by_token(session_token)

    def find_valid_by_token(self, session_token: str) -> Optional[AttendanceSession]:
        if not session_token:
            return None
        session = self._sessions.get_valid_by_token(session_token, now=self._clock())
        # Re-check against the same clock the rest of the core uses.
        if session and not session.is_valid(self._clock()):
            return None
        return session

    def find_active_by_class(self, class_id: int) -> Optional[AttendanceSession]:
        return self._sessions.get_active_for_class(class_id, now=self._clock())

    def is_valid(self, session: AttendanceSession) -> bool:
        return session.is_valid(self._clock())

    def is_expired(self, session: AttendanceSession) -> bool:
        return session.is_expired(self._clock())

    def summarize(self, session: AttendanceSession) -> SessionSummary:
        now = self._clock()
        return SessionSummary(
            session_id=session.session_id,
            class_id=session.class_id,
            session_token=session.session_token,
            expires_at=session.expires_at,
            is_active=session.is_active,
            is_valid=session.is_valid(now),
            remaining_minutes=session.remaining_minutes(now),
        )

    def extend(self, session: AttendanceSession, extra_minutes: float = DEFAULT_EXTEND_MINUTES) -> AttendanceSession:
        extra = require_positive(extra_minutes, "minutes")
        now = self._clock()
        if not session.is_valid(now):
            raise ExpiredSessionError()

        updated = self._sessions.extend(session.session_id, minutes=extra, now=now)
        if updated is None:
            # Lost a race with deactivate/expiry between the check and the update.
            raise ExpiredSessionError()

        logger.info("Extended session %s by %s min -> %s", session.session_id, extra, updated.expires_at.isoformat())
        return updated

    def deactivate(self, session: AttendanceSession) -> AttendanceSession:
        updated = self._sessions.deactivate(session.session_id)
        if updated is None:
            raise SessionNotFoundError()
        logger.info("Deactivated session %s", session.session_id)
        return updated

    def cleanup_expired(self) -> int:
        count = self._sessions.deactivate_expired(now=self._clock())
        if count:
            logger.info("Deactivated %d expired session(s)", count)
        return count

    def get_shareable_data(self, session_or_token: Union[AttendanceSession, str]) -> CheckInPayload:
        # Always read the stored row: a caller's copy may have been superseded.
        if isinstance(session_or_token, AttendanceSession):
            session = self._sessions.get_by_id(session_or_token.session_id)
        else:
            session = self.find_by_token(session_or_token)
        if session is None:
            raise SessionNotFoundError()

        if not session.is_valid(self._clock()):
            raise InvalidSessionStateError()

        class_info = self._classes.get_by_id(session.class_id)
        if class_info is None:
            raise ClassNotFoundError()

        return CheckInPayload(
            session_token=session.session_token,
            class_id=class_info.class_id,
            class_name=class_info.name,
            location=class_info.location,
            expires_at=session.expires_at,
        )
