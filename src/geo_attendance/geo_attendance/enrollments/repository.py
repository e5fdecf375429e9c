from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Enrollment


class EnrollmentRepository(Protocol):
    def get(self, student_id: int, class_id: int) -> Optional[Enrollment]:
        """Return the (student, class) row regardless of its active flag."""

        raise NotImplementedError

    def is_active(self, student_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def create(self, *, student_id: int, class_id: int, enrolled_at: datetime) -> Optional[Enrollment]:
        """Insert a new row; None when the (student, class) pair already exists."""

        raise NotImplementedError

    def set_active(self, student_id: int, class_id: int, *, is_active: bool) -> bool:
        """Flip the flag only if it currently holds the opposite value."""

        raise NotImplementedError

    def count_for_class(self, class_id: int, *, include_inactive: bool = False) -> int:
        raise NotImplementedError

    def count_for_student(self, student_id: int, *, include_inactive: bool = False) -> int:
        raise NotImplementedError

    def list_for_class(self, class_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        raise NotImplementedError
