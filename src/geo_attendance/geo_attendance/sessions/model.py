from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..classes.model import ClassLocation


@dataclass(frozen=True)
class AttendanceSession:
    """One check-in window for one class.

    Derived state depends on the current time, so it is computed against an
    explicit ``now`` rather than read from the row.
    """

    session_id: int
    class_id: int
    session_token: str
    expires_at: datetime
    is_active: bool
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_valid(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)

    def remaining_minutes(self, now: datetime) -> int:
        if self.is_expired(now):
            return 0
        return math.ceil((self.expires_at - now).total_seconds() / 60)


@dataclass(frozen=True)
class CheckInPayload:
    """Data encoded into the rotating check-in code."""

    session_token: str
    class_id: int
    class_name: str
    location: Optional[ClassLocation]
    expires_at: datetime

    def to_dict(self) -> dict:
        return {
            "sessionToken": self.session_token,
            "classId": self.class_id,
            "className": self.class_name,
            "location": self.location.to_dict() if self.location else None,
            "expiresAt": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class SessionSummary:
    session_id: int
    class_id: int
    session_token: str
    expires_at: datetime
    is_active: bool
    is_valid: bool
    remaining_minutes: int

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "classId": self.class_id,
            "sessionToken": self.session_token,
            "expiresAt": self.expires_at.isoformat(),
            "isActive": self.is_active,
            "isValid": self.is_valid,
            "remainingMinutes": self.remaining_minutes,
        }
