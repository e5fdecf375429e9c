from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import pytest

from fakes import (
    BASE_TIME,
    CLASS_ID,
    CLASSROOM,
    INACTIVE_STUDENT_ID,
    NO_LOCATION_CLASS_ID,
    OTHER_STUDENT_ID,
    STUDENT_ID,
    TEACHER_ID,
    FakeClock,
    InMemoryAttendance,
    InMemoryClasses,
    InMemoryEnrollments,
    InMemorySessions,
    InMemoryStats,
    InMemoryUsers,
    SequenceTokens,
)
from src.geo_attendance.geo_attendance.classes.model import ClassInfo
from src.geo_attendance.geo_attendance.container import Container, build_services
from src.geo_attendance.geo_attendance.core.enums import Role
from src.geo_attendance.geo_attendance.users.model import Student


@dataclass
class World:
    clock: FakeClock
    tokens: SequenceTokens
    users: InMemoryUsers
    classes: InMemoryClasses
    sessions: InMemorySessions
    enrollments: InMemoryEnrollments
    attendance: InMemoryAttendance
    stats: InMemoryStats
    container: Container

    def rebuild(self, **overrides) -> Container:
        kwargs = dict(
            users_repo=self.users,
            classes_repo=self.classes,
            sessions_repo=self.sessions,
            enrollments_repo=self.enrollments,
            attendance_repo=self.attendance,
            stats_repo=self.stats,
            clock=self.clock,
            token_generator=self.tokens,
        )
        kwargs.update(overrides)
        return build_services(**kwargs)


@pytest.fixture
def world() -> World:
    clock = FakeClock()
    tokens = SequenceTokens()
    users = InMemoryUsers(
        {
            STUDENT_ID: Student(STUDENT_ID, "Nguyen Van An", Role.STUDENT),
            OTHER_STUDENT_ID: Student(OTHER_STUDENT_ID, "Tran Thi Binh", Role.STUDENT),
            INACTIVE_STUDENT_ID: Student(INACTIVE_STUDENT_ID, "Le Van Cuong", Role.STUDENT, is_active=False),
            TEACHER_ID: Student(TEACHER_ID, "Pham Minh Duc", Role.TEACHER),
        }
    )
    classes = InMemoryClasses(
        {
            CLASS_ID: ClassInfo(CLASS_ID, "Algorithms", "CS201", TEACHER_ID, CLASSROOM),
            NO_LOCATION_CLASS_ID: ClassInfo(NO_LOCATION_CLASS_ID, "Field Trip", "GEO101", TEACHER_ID, None),
        }
    )
    sessions = InMemorySessions()
    enrollments = InMemoryEnrollments()
    attendance = InMemoryAttendance(sessions)
    stats = InMemoryStats(attendance, users, classes)

    for sid in (STUDENT_ID, INACTIVE_STUDENT_ID):
        enrollments.create(student_id=sid, class_id=CLASS_ID, enrolled_at=BASE_TIME - timedelta(days=30))
    enrollments.create(student_id=STUDENT_ID, class_id=NO_LOCATION_CLASS_ID, enrolled_at=BASE_TIME - timedelta(days=30))

    w = World(clock, tokens, users, classes, sessions, enrollments, attendance, stats, container=None)
    w.container = w.rebuild()
    return w
