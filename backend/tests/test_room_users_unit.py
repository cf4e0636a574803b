"""Unit tests for room admission and member listing."""

from __future__ import annotations

import uuid

import pytest
from fastapi import HTTPException

from meet.models import User
from meet.repositories import RoomRepository, RoomUserRepository, UserRepository
from meet.services import RoomService, RoomUserService


@pytest.fixture()
def room_service(db_session) -> RoomService:
    return RoomService(RoomRepository(db_session))


@pytest.fixture()
def room_user_service(db_session, room_service, avatars) -> RoomUserService:
    return RoomUserService(RoomUserRepository(db_session), room_service, UserRepository(db_session), avatars)


@pytest.fixture()
def room(room_service):
    return room_service.create_room(str(uuid.uuid4()), "host-1", 2)


def test_add_member_creates_a_pending_membership(room_user_service, room):
    member = room_user_service.add_member(room.id, user_id="user-1", name="Ada", last_name="Lovelace")

    assert member.user_id == "user-1"
    assert member.room_id == room.id
    assert member.participant_id is None
    assert member.joined_at is None
    assert member.anonymous is False
    assert room_user_service.get_member("user-1", room.id).id == member.id


def test_anonymous_member_gets_a_generated_identity(room_user_service, room):
    member = room_user_service.add_member(room.id, user_id="user-1", anonymous=True)

    assert member.anonymous is True
    assert member.user_id != "user-1"
    assert str(uuid.UUID(member.user_id)) == member.user_id


def test_member_without_identity_gets_a_generated_one(room_user_service, room):
    member = room_user_service.add_member(room.id)

    assert uuid.UUID(member.user_id)


def test_add_member_rejects_a_full_room(room_user_service, room):
    room_user_service.add_member(room.id, anonymous=True)
    room_user_service.add_member(room.id, anonymous=True)

    with pytest.raises(HTTPException) as exc:
        room_user_service.add_member(room.id, anonymous=True)

    assert exc.value.status_code == 400
    assert exc.value.detail == "The room is full"
    assert room_user_service.count_members(room.id) == 2


def test_add_member_rejects_a_duplicate_user(room_user_service, room):
    room_user_service.add_member(room.id, user_id="user-1")

    with pytest.raises(HTTPException) as exc:
        room_user_service.add_member(room.id, user_id="user-1")

    assert exc.value.status_code == 409


def test_add_member_to_unknown_room(room_user_service):
    with pytest.raises(HTTPException) as exc:
        room_user_service.add_member(str(uuid.uuid4()), user_id="user-1")

    assert exc.value.status_code == 404


def test_members_are_listed_with_signed_avatars(db_session, room_user_service, room, avatars):
    db_session.add_all(
        [
            User(uuid="user-1", email="ada@example.com", name="Ada", lastname="Lovelace", avatar="avatars/ada.png"),
            User(uuid="user-2", email="alan@example.com", name="Alan", lastname="Turing", avatar=None),
        ]
    )
    db_session.commit()
    room_user_service.add_member(room.id, user_id="user-1", name="Ada", last_name="Lovelace")
    guest = room_user_service.add_member(room.id, name="Guest", anonymous=True)

    members = {member.id: member for member in room_user_service.get_members_with_avatars(room.id)}

    assert set(members) == {"user-1", guest.user_id}
    assert members["user-1"].avatar == "https://avatars.test/avatars/ada.png?signed=1"
    assert members["user-1"].last_name == "Lovelace"
    assert members[guest.user_id].avatar is None
    assert members[guest.user_id].anonymous is True
    assert avatars.calls == [["avatars/ada.png"]]


def test_members_without_avatars_skip_signing(room_user_service, room, avatars):
    room_user_service.add_member(room.id, user_id="user-1")

    members = room_user_service.get_members_with_avatars(room.id)

    assert [member.avatar for member in members] == [None]
    assert avatars.calls == []


def test_remove_member(room_user_service, room):
    room_user_service.add_member(room.id, user_id="user-1")

    assert room_user_service.remove_member("user-1", room) == 1
    assert room_user_service.remove_member("user-1", room) == 0
    assert room_user_service.count_members(room.id) == 0
