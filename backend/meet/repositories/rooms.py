"""Persistence access for rooms.

Repositories flush but never commit, the calling service owns the transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from meet.models import Room, RoomUser


class RoomRepository:
    """Query shapes used by the room lifecycle."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, room_id: str, host_id: str, max_users_allowed: int) -> Room:
        room = Room(
            id=room_id,
            host_id=host_id,
            max_users_allowed=max_users_allowed,
            is_closed=False,
            remove_at=None,
        )
        self.db.add(room)
        self.db.flush()
        return room

    def find_by_id(self, room_id: str) -> Room | None:
        return self.db.get(Room, room_id, populate_existing=True)

    def find_by_host_id(self, host_id: str, *, is_closed: bool | None = None) -> Room | None:
        stmt = select(Room).where(Room.host_id == host_id)
        if is_closed is not None:
            stmt = stmt.where(Room.is_closed == is_closed)
        stmt = stmt.order_by(Room.created_at.desc()).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def update(self, room_id: str, **values: Any) -> int:
        result = self.db.execute(update(Room).where(Room.id == room_id).values(**values))
        return result.rowcount

    def set_remove_at_if_unset(self, room_id: str, remove_at: datetime) -> int:
        """Set ``remove_at`` only while it is still NULL and return the affected row count."""

        result = self.db.execute(
            update(Room)
            .where(Room.id == room_id, Room.remove_at.is_(None))
            .values(remove_at=remove_at)
        )
        return result.rowcount

    def delete(self, room_id: str) -> bool:
        # Memberships go first so SQLite, which ignores ON DELETE CASCADE
        # without the foreign_keys pragma, ends up in the same state as MySQL.
        self.db.execute(delete(RoomUser).where(RoomUser.room_id == room_id))
        result = self.db.execute(delete(Room).where(Room.id == room_id))
        return result.rowcount > 0

    def find_expired_ids(self, now: datetime) -> list[str]:
        stmt = select(Room.id).where(Room.remove_at.is_not(None), Room.remove_at < now)
        return list(self.db.execute(stmt).scalars().all())
