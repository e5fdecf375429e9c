from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from fakes import CLASS_ID, CLASSROOM, NO_LOCATION_CLASS_ID, STUDENT_ID, TEACHER_ID, InMemorySessions, SequenceTokens
from src.geo_attendance.geo_attendance.core.enums import Role
from src.geo_attendance.geo_attendance.core.exceptions import (
    AuthorizationError,
    ClassLocationNotConfiguredError,
    ClassNotFoundError,
    ExpiredSessionError,
    InvalidSessionStateError,
    SessionNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from src.geo_attendance.geo_attendance.sessions.repository import ActiveSessionConflictError
from src.geo_attendance.geo_attendance.sessions.tokens import HexTokenGenerator


def test_create_returns_active_session_with_default_duration(world):
    svc = world.container.session_service

    s = svc.create_for_class(CLASS_ID)

    assert s.is_active
    assert s.class_id == CLASS_ID
    assert s.created_at == world.clock()
    assert s.expires_at == world.clock() + timedelta(minutes=30)
    assert s.remaining_minutes(world.clock()) == 30


def test_new_session_supersedes_previous_one(world):
    svc = world.container.session_service
    first = svc.create_for_class(CLASS_ID)
    second = svc.create_for_class(CLASS_ID, 10)

    assert svc.get(first.session_id).is_active is False
    assert svc.find_valid_by_token(first.session_token) is None
    assert svc.find_valid_by_token(second.session_token) == second
    assert svc.find_active_by_class(CLASS_ID) == second


def test_create_for_unknown_class(world):
    with pytest.raises(ClassNotFoundError):
        world.container.session_service.create_for_class(999)


@pytest.mark.parametrize("duration", [0, -5, "abc"])
def test_create_rejects_non_positive_duration(world, duration):
    with pytest.raises(ValidationError):
        world.container.session_service.create_for_class(CLASS_ID, duration)


def test_session_expires_by_clock(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID, 1)

    world.clock.advance(seconds=60)
    assert svc.is_valid(s)  # expiry instant is still valid

    world.clock.advance(milliseconds=100)
    assert svc.is_expired(s)
    assert svc.find_valid_by_token(s.session_token) is None
    assert svc.find_by_token(s.session_token) == s


def test_extend_pushes_expiry(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID, 10)

    updated = svc.extend(s)

    assert updated.expires_at == s.expires_at + timedelta(minutes=15)
    assert svc.summarize(updated).remaining_minutes == 25


def test_extend_expired_session_fails(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID, 5)
    world.clock.advance(minutes=6)

    with pytest.raises(ExpiredSessionError):
        svc.extend(s, 10)


def test_extend_stale_copy_of_deactivated_session_fails(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID, 5)
    svc.deactivate(s)

    # `s` still says active; the repository guard catches it.
    with pytest.raises(ExpiredSessionError):
        svc.extend(s, 10)


def test_deactivate_and_cleanup(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID, 5)
    assert svc.deactivate(s).is_active is False

    live = svc.create_for_class(CLASS_ID, 5)
    world.clock.advance(minutes=10)
    assert svc.cleanup_expired() == 1
    assert svc.get(live.session_id).is_active is False
    assert svc.cleanup_expired() == 0


def test_token_collision_is_retried(world):
    svc = world.container.session_service
    first = svc.create_for_class(CLASS_ID)

    tokens = SequenceTokens([first.session_token, first.session_token, "f" * 64])
    svc2 = world.rebuild(token_generator=tokens).session_service
    s = svc2.create_for_class(CLASS_ID)

    assert s.session_token == "f" * 64


def test_token_collision_gives_up_after_max_attempts(world):
    first = world.container.session_service.create_for_class(CLASS_ID)
    tokens = SequenceTokens([first.session_token] * 10)
    svc = world.rebuild(token_generator=tokens).session_service

    with pytest.raises(StorageUnavailableError, match="token collision"):
        svc.create_for_class(CLASS_ID)


def test_hex_tokens_are_64_hex_chars():
    gen = HexTokenGenerator()
    token = gen()
    assert gen.length == 64
    assert len(token) == 64
    int(token, 16)


def test_concurrent_creates_leave_one_active_session(world):
    world.container = world.rebuild(token_generator=HexTokenGenerator())
    svc = world.container.session_service
    barrier = threading.Barrier(8)
    errors = []

    def worker():
        barrier.wait()
        try:
            svc.create_for_class(CLASS_ID)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    active = [s for s in world.sessions.all() if s.class_id == CLASS_ID and s.is_active]
    assert len(active) == 1
    assert len({s.session_token for s in world.sessions.all()}) == 8


def test_shareable_data(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID)

    payload = svc.get_shareable_data(s)

    assert payload.session_token == s.session_token
    assert payload.class_name == "Algorithms"
    assert payload.location == CLASSROOM
    assert payload.to_dict()["location"] == {"lat": CLASSROOM.latitude, "lng": CLASSROOM.longitude, "label": "Hall A1"}


def test_shareable_data_for_superseded_session_fails(world):
    svc = world.container.session_service
    old = svc.create_for_class(CLASS_ID)
    svc.create_for_class(CLASS_ID)

    with pytest.raises(InvalidSessionStateError):
        svc.get_shareable_data(old)


def test_shareable_data_unknown_token(world):
    with pytest.raises(SessionNotFoundError):
        world.container.session_service.get_shareable_data("nope")


def test_shareable_data_when_class_was_removed(world):
    svc = world.container.session_service
    s = svc.create_for_class(CLASS_ID)
    del world.classes.classes[CLASS_ID]

    with pytest.raises(ClassNotFoundError):
        svc.get_shareable_data(s.session_token)


def test_create_refuses_class_without_location(world):
    with pytest.raises(ClassLocationNotConfiguredError):
        world.container.session_service.create_for_class(NO_LOCATION_CLASS_ID)
    assert world.sessions.all() == []


class _AlwaysConflicting(InMemorySessions):
    def create_for_class(self, **kwargs):
        raise ActiveSessionConflictError(str(kwargs["class_id"]))


def test_give_up_message_names_last_failure(world):
    svc = world.rebuild(sessions_repo=_AlwaysConflicting()).session_service

    with pytest.raises(StorageUnavailableError, match="another session was created concurrently"):
        svc.create_for_class(CLASS_ID)


def test_owner_and_admin_can_manage_class(world):
    svc = world.container.session_service
    assert svc.ensure_can_manage(CLASS_ID, user_id=TEACHER_ID, role=Role.TEACHER).class_id == CLASS_ID
    assert svc.ensure_can_manage(CLASS_ID, user_id=1234, role=Role.ADMIN).class_id == CLASS_ID


@pytest.mark.parametrize("user_id,role", [(99, Role.TEACHER), (STUDENT_ID, Role.STUDENT)])
def test_others_cannot_manage_class(world, user_id, role):
    with pytest.raises(AuthorizationError):
        world.container.session_service.ensure_can_manage(CLASS_ID, user_id=user_id, role=role)


def test_manage_unknown_class(world):
    with pytest.raises(ClassNotFoundError):
        world.container.session_service.ensure_can_manage(999, user_id=TEACHER_ID, role=Role.TEACHER)
