from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string into a naive UTC datetime."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (matches MySQL DATETIME columns).

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def minutes(value: float) -> timedelta:
    return timedelta(minutes=float(value))


def in_range(value: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Half-open ``[start, end)`` membership; a missing bound is unbounded."""
    if start is not None and value < start:
        return False
    if end is not None and value >= end:
        return False
    return True
