from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .common.datetime_utils import Clock
from .core.constants import DEFAULT_MAX_DISTANCE_METERS, DEFAULT_SESSION_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.repository import EnrollmentRepository
from .enrollments.service import EnrollmentService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .sessions.tokens import TokenGenerator
from .stats.mysql_stats_repository import MySQLStatsRepository
from .stats.repository import StatsRepository
from .stats.service import StatsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    classes_repo: ClassRepository
    sessions_repo: SessionRepository
    enrollments_repo: EnrollmentRepository
    attendance_repo: AttendanceRepository
    stats_repo: StatsRepository

    session_service: SessionService
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    stats_service: StatsService

    max_distance_meters: float = DEFAULT_MAX_DISTANCE_METERS
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: UserRepository,
    classes_repo: ClassRepository,
    sessions_repo: SessionRepository,
    enrollments_repo: EnrollmentRepository,
    attendance_repo: AttendanceRepository,
    stats_repo: StatsRepository,
    clock: Optional[Clock] = None,
    token_generator: Optional[TokenGenerator] = None,
    default_session_minutes: float = DEFAULT_SESSION_MINUTES,
    max_distance_meters: float = DEFAULT_MAX_DISTANCE_METERS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    session_service = SessionService(
        sessions_repo,
        classes_repo,
        token_generator=token_generator,
        clock=clock,
        default_minutes=default_session_minutes,
    )
    enrollment_service = EnrollmentService(enrollments_repo, users_repo, classes_repo, clock=clock)
    attendance_service = AttendanceService(
        attendance_repo,
        session_service,
        enrollment_service,
        users_repo,
        classes_repo,
        clock=clock,
    )
    stats_service = StatsService(attendance_repo, stats_repo, sessions_repo, enrollments_repo)

    return Container(
        users_repo=users_repo,
        classes_repo=classes_repo,
        sessions_repo=sessions_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        stats_repo=stats_repo,
        session_service=session_service,
        enrollment_service=enrollment_service,
        attendance_service=attendance_service,
        stats_service=stats_service,
        max_distance_meters=float(max_distance_meters),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    default_session_minutes: float = DEFAULT_SESSION_MINUTES,
    max_distance_meters: float = DEFAULT_MAX_DISTANCE_METERS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        stats_repo=MySQLStatsRepository(conn),
        default_session_minutes=default_session_minutes,
        max_distance_meters=max_distance_meters,
        conn=conn,
    )
