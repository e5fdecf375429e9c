from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import Clock, now_utc
from ..core.exceptions import (
    AlreadyEnrolledError,
    ClassNotFoundError,
    InactiveStudentError,
    NotEnrolledError,
    RoleNotPermittedError,
    StudentNotFoundError,
)
from ..users.model import Student
from ..users.repository import UserRepository
from .model import Enrollment
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Answers "may this student submit attendance for this class"."""

    def __init__(
        self,
        enrollments: EnrollmentRepository,
        users: UserRepository,
        classes: ClassRepository,
        *,
        clock: Optional[Clock] = None,
    ):
        self._enrollments = enrollments
        self._users = users
        self._classes = classes
        self._clock = clock or now_utc

    def is_enrolled(self, student_id: int, class_id: int) -> bool:
        return self._enrollments.is_active(student_id, class_id)

    def _require_enrollable_student(self, student_id: int) -> Student:
        student = self._users.get_by_id(student_id)
        if not student:
            raise StudentNotFoundError()
        if not student.role.can_enroll:
            raise RoleNotPermittedError("Only students can be enrolled in classes")
        if not student.is_active:
            raise InactiveStudentError("Cannot enroll an inactive student")
        return student

    def enroll(self, student_id: int, class_id: int) -> Enrollment:
        self._require_enrollable_student(student_id)
        if not self._classes.get_by_id(class_id):
            raise ClassNotFoundError()

        # Two passes: the second one resolves a concurrent insert of the same pair.
        for _ in range(2):
            existing = self._enrollments.get(student_id, class_id)
            if existing is not None:
                if existing.is_active:
                    raise AlreadyEnrolledError()
                if not self._enrollments.set_active(student_id, class_id, is_active=True):
                    raise AlreadyEnrolledError()
                logger.info("Reactivated enrollment student=%s class=%s", student_id, class_id)
                return self._enrollments.get(student_id, class_id) or existing

            created = self._enrollments.create(student_id=student_id, class_id=class_id, enrolled_at=self._clock())
            if created is not None:
                logger.info("Enrolled student=%s class=%s", student_id, class_id)
                return created

        raise AlreadyEnrolledError()

    def deactivate(self, student_id: int, class_id: int) -> Enrollment:
        existing = self._enrollments.get(student_id, class_id)
        if existing is None:
            raise NotEnrolledError()
        self._enrollments.set_active(student_id, class_id, is_active=False)
        logger.info("Deactivated enrollment student=%s class=%s", student_id, class_id)
        return self._enrollments.get(student_id, class_id) or existing

    def reactivate(self, student_id: int, class_id: int) -> Enrollment:
        existing = self._enrollments.get(student_id, class_id)
        if existing is None:
            raise NotEnrolledError()
        if existing.is_active:
            return existing
        self._require_enrollable_student(student_id)
        self._enrollments.set_active(student_id, class_id, is_active=True)
        logger.info("Reactivated enrollment student=%s class=%s", student_id, class_id)
        return self._enrollments.get(student_id, class_id) or existing

    def count_for_class(self, class_id: int, *, include_inactive: bool = False) -> int:
        return self._enrollments.count_for_class(class_id, include_inactive=include_inactive)

    def count_for_student(self, student_id: int, *, include_inactive: bool = False) -> int:
        return self._enrollments.count_for_student(student_id, include_inactive=include_inactive)

    def list_for_class(self, class_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        return self._enrollments.list_for_class(class_id, include_inactive=include_inactive)

    def list_for_student(self, student_id: int, *, include_inactive: bool = False) -> Sequence[Enrollment]:
        return self._enrollments.list_for_student(student_id, include_inactive=include_inactive)
