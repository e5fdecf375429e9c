from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Enrollment:
    """Permission for one student to submit attendance in one class."""

    enrollment_id: int
    student_id: int
    class_id: int
    is_active: bool
    enrolled_at: datetime
