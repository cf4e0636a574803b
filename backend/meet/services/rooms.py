"""Room lifecycle: creation, closing, expiration and removal."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from meet.config import Settings, get_settings
from meet.core.time import add_days, is_past, utcnow
from meet.database import transaction
from meet.models import Room
from meet.repositories import RoomRepository

logger = logging.getLogger(__name__)


class RoomService:
    """Owns every state transition of a :class:`~meet.models.Room`."""

    def __init__(self, rooms: RoomRepository, settings: Settings | None = None) -> None:
        self.rooms = rooms
        self.db = rooms.db
        self._settings = settings or get_settings()

    def create_room(self, room_id: str, host_id: str, capacity: int) -> Room:
        """Persist an open room for ``host_id``.

        The one-open-room-per-host rule is checked here rather than by a
        constraint, two concurrent creations for the same host can both pass.
        """

        existing = self.get_open_room_by_host_id(host_id)
        if existing is not None:
            logger.warning("User %s already has an active room as host: %s", host_id, existing.id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already has an active room as host",
            )

        with transaction(self.db):
            room = self.rooms.create(room_id, host_id, capacity)
        logger.info("Created room %s for host %s with capacity %s", room_id, host_id, capacity)
        return room

    def get_room_by_id(self, room_id: str) -> Room | None:
        return self.rooms.find_by_id(room_id)

    def get_room_or_404(self, room_id: str) -> Room:
        room = self.get_room_by_id(room_id)
        if room is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Specified room not found")
        return room

    def get_open_room_by_host_id(self, host_id: str) -> Room | None:
        return self.rooms.find_by_host_id(host_id, is_closed=False)

    def close_room(self, room_id: str) -> None:
        with transaction(self.db):
            self.rooms.update(room_id, is_closed=True)
        logger.info("Closed room %s", room_id)

    def open_room(self, room_id: str) -> None:
        with transaction(self.db):
            self.rooms.update(room_id, is_closed=False)
        logger.info("Reopened room %s", room_id)

    def remove_room(self, room_id: str) -> None:
        with transaction(self.db):
            removed = self.rooms.delete(room_id)
        if removed:
            logger.info("Removed room %s", room_id)

    def set_expiration_if_unset(self, room_id: str) -> bool:
        """Start the expiration clock of a room unless it is already running."""

        remove_at = add_days(self._settings.room_expiration_days)
        with transaction(self.db):
            updated = self.rooms.set_remove_at_if_unset(room_id, remove_at)
        if updated:
            logger.info("Room %s will be removed at %s", room_id, remove_at.isoformat())
        return bool(updated)

    @staticmethod
    def is_expired(room: Room) -> bool:
        return is_past(room.remove_at)

    def purge_expired_rooms(self) -> int:
        """Delete every room whose expiration date has passed."""

        expired = self.rooms.find_expired_ids(utcnow())
        for room_id in expired:
            self.remove_room(room_id)
        if expired:
            logger.info("Purged %d expired rooms", len(expired))
        return len(expired)
