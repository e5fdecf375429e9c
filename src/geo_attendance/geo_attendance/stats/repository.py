from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ClassStatsRow, StudentHistoryRow


class StatsRepository(Protocol):
    """Aggregating read queries (joins across records, sessions, classes, users)."""

    def class_stats(
        self,
        class_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[ClassStatsRow]:
        raise NotImplementedError

    def student_history(
        self,
        student_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[StudentHistoryRow]:
        raise NotImplementedError
