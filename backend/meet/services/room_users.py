"""Admission of users into rooms and membership listing."""

from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError

from meet.database import transaction
from meet.models import Room, RoomUser
from meet.repositories import RoomUserRepository, UserRepository
from meet.schemas.calls import RoomMemberRead
from meet.services.avatars import AvatarService
from meet.services.rooms import RoomService

logger = logging.getLogger(__name__)


class RoomUserService:
    def __init__(
        self,
        room_users: RoomUserRepository,
        room_service: RoomService,
        users: UserRepository,
        avatars: AvatarService,
    ) -> None:
        self.room_users = room_users
        self.room_service = room_service
        self.users = users
        self.avatars = avatars
        self.db = room_users.db

    def add_member(
        self,
        room_id: str,
        *,
        user_id: str | None = None,
        name: str | None = None,
        last_name: str | None = None,
        anonymous: bool = False,
    ) -> RoomUser:
        """Admit a user into a room in the pending (not yet connected) state.

        Capacity is counted before the insert without a lock; concurrent joins
        to the same room may overshoot ``max_users_allowed``.
        """

        room = self.room_service.get_room_or_404(room_id)

        current = self.room_users.count_by_room_id(room.id)
        if current >= room.max_users_allowed:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The room is full")

        if anonymous or not user_id:
            user_id = str(uuid.uuid4())

        if self.room_users.find_by_user_id_and_room_id(user_id, room.id) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already in this room")

        try:
            with transaction(self.db):
                room_user = self.room_users.create(
                    room_id=room.id,
                    user_id=user_id,
                    name=name,
                    last_name=last_name,
                    anonymous=bool(anonymous),
                )
        except IntegrityError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="User is already in this room"
            ) from exc

        logger.info("User %s admitted to room %s as %s", user_id, room.id, room_user.id)
        return room_user

    def get_member(self, user_id: str, room_id: str) -> RoomUser | None:
        return self.room_users.find_by_user_id_and_room_id(user_id, room_id)

    def get_members_with_avatars(self, room_id: str) -> list[RoomMemberRead]:
        room = self.room_service.get_room_or_404(room_id)
        members = self.room_users.find_all_by_room_id(room.id)

        users = self.users.find_many_by_uuid(member.user_id for member in members)
        avatar_keys = {user.uuid: user.avatar for user in users if user.avatar}
        urls = self.avatars.get_download_urls(avatar_keys.values()) if avatar_keys else {}

        return [
            RoomMemberRead(
                id=member.user_id,
                name=member.name,
                last_name=member.last_name,
                anonymous=member.anonymous,
                avatar=urls.get(avatar_keys.get(member.user_id, "")),
            )
            for member in members
        ]

    def count_members(self, room_id: str) -> int:
        room = self.room_service.get_room_or_404(room_id)
        return self.room_users.count_by_room_id(room.id)

    def remove_member(self, user_id: str, room: Room) -> int:
        with transaction(self.db):
            removed = self.room_users.delete_by_user_id_and_room_id(user_id, room.id)
        if removed:
            logger.info("User %s left room %s", user_id, room.id)
        return removed
