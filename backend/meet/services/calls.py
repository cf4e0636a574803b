"""Call use cases combining tiers, rooms, memberships and JaaS tokens."""

from __future__ import annotations

import logging
import uuid

from fastapi import HTTPException, status

from meet.config import Settings, get_settings
from meet.core.jitsi import ANONYMOUS_EMAIL, ANONYMOUS_NAME, JitsiUser, generate_jitsi_jwt, jitsi_user_id
from meet.models import Room, RoomUser
from meet.schemas.calls import (
    AuthenticatedUser,
    CallRead,
    CreateCallResponse,
    JoinCallRequest,
    JoinCallResponse,
)
from meet.services.payments import PaymentsClient
from meet.services.room_users import RoomUserService
from meet.services.rooms import RoomService

logger = logging.getLogger(__name__)


class CallService:
    def __init__(
        self,
        room_service: RoomService,
        room_user_service: RoomUserService,
        payments: PaymentsClient,
        settings: Settings | None = None,
    ) -> None:
        self.room_service = room_service
        self.room_user_service = room_user_service
        self.payments = payments
        self._settings = settings or get_settings()

    def create_call(self, user: AuthenticatedUser) -> CreateCallResponse:
        """Create a room hosted by ``user`` and return a moderator token for it."""

        active = self.room_service.get_open_room_by_host_id(user.uuid)
        if active is not None:
            logger.warning("User %s already has an active room as host: %s", user.email, active.id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already has an active room as host",
            )

        meet = self.payments.get_user_tier(user.uuid).features_per_service.meet
        if not meet.enabled:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User does not have permission to create a call",
            )

        room_id = str(uuid.uuid4())
        token = generate_jitsi_jwt(
            JitsiUser(id=user.uuid, name=user.full_name, email=user.email or ""),
            room_id,
            True,
            settings=self._settings,
        )
        self.room_service.create_room(room_id, user.uuid, meet.pax_per_call)

        return CreateCallResponse(
            token=token,
            room=room_id,
            pax_per_call=meet.pax_per_call,
            app_id=self._settings.jitsi_app_id,
        )

    def get_call(self, room_id: str) -> CallRead:
        return CallRead.model_validate(self.room_service.get_room_or_404(room_id))

    def join_call(
        self,
        room_id: str,
        user: AuthenticatedUser | None,
        request: JoinCallRequest,
    ) -> JoinCallResponse:
        room = self.room_service.get_room_or_404(room_id)

        if self.room_service.is_expired(room):
            self.room_service.remove_room(room.id)
            raise HTTPException(status_code=status.HTTP_410_GONE, detail="Call is expired")

        anonymous = request.anonymous or user is None
        user_id = None if anonymous else user.uuid
        is_owner = user_id is not None and user_id == room.host_id

        if room.is_closed and not is_owner:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Room is closed")

        room_user = self.room_user_service.get_member(user_id, room.id) if user_id else None
        if room_user is None:
            room_user = self.room_user_service.add_member(
                room.id,
                user_id=user_id,
                name=request.name or (user.name if user and not anonymous else None),
                last_name=request.last_name or (user.lastname if user and not anonymous else None),
                anonymous=anonymous,
            )
        else:
            logger.info("User %s rejoining room %s with membership %s", user_id, room.id, room_user.id)

        token = generate_jitsi_jwt(
            self._token_user(room_user, user),
            room.id,
            is_owner,
            settings=self._settings,
        )

        if is_owner and room.is_closed:
            self.room_service.open_room(room.id)

        return JoinCallResponse(
            token=token,
            room=room.id,
            user_id=room_user.user_id,
            app_id=self._settings.jitsi_app_id,
        )

    @staticmethod
    def _token_user(room_user: RoomUser, user: AuthenticatedUser | None) -> JitsiUser:
        token_id = jitsi_user_id(room_user.user_id, room_user.id)
        if room_user.anonymous:
            return JitsiUser(id=token_id, name=ANONYMOUS_NAME, email=ANONYMOUS_EMAIL)
        name = " ".join(part for part in (room_user.name, room_user.last_name) if part)
        return JitsiUser(id=token_id, name=name, email=(user.email if user else None) or "")

    def leave_call(self, room_id: str, user_id: str) -> None:
        """Remove ``user_id`` from the room, closing or deleting the room as needed."""

        room: Room = self.room_service.get_room_or_404(room_id)
        is_host_leaving = room.host_id == user_id

        self.room_user_service.remove_member(user_id, room)

        remaining = self.room_user_service.count_members(room.id)
        if remaining == 0:
            self.room_service.remove_room(room.id)
        elif is_host_leaving:
            self.room_service.close_room(room.id)
