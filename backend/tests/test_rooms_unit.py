"""Unit tests for the room lifecycle."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException

from meet.core.time import as_utc, utcnow
from meet.models import Room, RoomUser
from meet.repositories import RoomRepository, RoomUserRepository
from meet.services import RoomService


@pytest.fixture()
def room_service(db_session) -> RoomService:
    return RoomService(RoomRepository(db_session))


def new_id() -> str:
    return str(uuid.uuid4())


def test_create_room_persists_an_open_room(db_session, room_service):
    room_id = new_id()

    room = room_service.create_room(room_id, "host-1", 4)

    stored = db_session.get(Room, room_id, populate_existing=True)
    assert room.id == room_id
    assert stored is not None
    assert stored.host_id == "host-1"
    assert stored.max_users_allowed == 4
    assert stored.is_closed is False
    assert stored.remove_at is None


def test_create_room_rejects_a_second_open_room_for_the_same_host(room_service):
    room_service.create_room(new_id(), "host-1", 4)

    with pytest.raises(HTTPException) as exc:
        room_service.create_room(new_id(), "host-1", 4)

    assert exc.value.status_code == 409


def test_host_can_create_a_room_once_the_previous_one_is_closed(room_service):
    first = room_service.create_room(new_id(), "host-1", 4)
    room_service.close_room(first.id)

    second = room_service.create_room(new_id(), "host-1", 4)

    assert second.id != first.id
    assert room_service.get_open_room_by_host_id("host-1").id == second.id


def test_close_and_open_room(room_service):
    room = room_service.create_room(new_id(), "host-1", 4)

    room_service.close_room(room.id)
    assert room_service.get_room_by_id(room.id).is_closed is True

    room_service.open_room(room.id)
    assert room_service.get_room_by_id(room.id).is_closed is False


def test_get_room_or_404(room_service):
    with pytest.raises(HTTPException) as exc:
        room_service.get_room_or_404(new_id())

    assert exc.value.status_code == 404


def test_set_expiration_only_once(room_service):
    room = room_service.create_room(new_id(), "host-1", 4)

    assert room_service.set_expiration_if_unset(room.id) is True
    first = room_service.get_room_by_id(room.id).remove_at
    assert first is not None
    assert as_utc(first) > utcnow() + timedelta(days=29)

    assert room_service.set_expiration_if_unset(room.id) is False
    assert room_service.get_room_by_id(room.id).remove_at == first


def test_is_expired(room_service):
    room = room_service.create_room(new_id(), "host-1", 4)
    assert room_service.is_expired(room) is False

    room.remove_at = utcnow() + timedelta(hours=1)
    assert room_service.is_expired(room) is False

    room.remove_at = utcnow() - timedelta(seconds=1)
    assert room_service.is_expired(room) is True


def test_remove_room_deletes_its_memberships(db_session, room_service):
    room = room_service.create_room(new_id(), "host-1", 4)
    RoomUserRepository(db_session).create(room_id=room.id, user_id="host-1")
    db_session.commit()

    room_service.remove_room(room.id)

    assert room_service.get_room_by_id(room.id) is None
    assert db_session.query(RoomUser).filter_by(room_id=room.id).count() == 0


def test_purge_expired_rooms_keeps_live_rooms(db_session, room_service):
    repository = RoomRepository(db_session)
    expired = room_service.create_room(new_id(), "host-1", 4)
    fresh = room_service.create_room(new_id(), "host-2", 4)
    never_joined = room_service.create_room(new_id(), "host-3", 4)
    repository.update(expired.id, remove_at=utcnow() - timedelta(minutes=1))
    repository.update(fresh.id, remove_at=utcnow() + timedelta(days=1))
    RoomUserRepository(db_session).create(room_id=expired.id, user_id="host-1")
    db_session.commit()

    purged = room_service.purge_expired_rooms()

    assert purged == 1
    assert room_service.get_room_by_id(expired.id) is None
    assert room_service.get_room_by_id(fresh.id) is not None
    assert room_service.get_room_by_id(never_joined.id) is not None
    assert db_session.query(RoomUser).filter_by(room_id=expired.id).count() == 0
