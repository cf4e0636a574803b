"""Persistence access for room memberships."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from meet.models import RoomUser


class RoomUserRepository:
    """Query shapes used by admission and webhook reconciliation."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        *,
        room_id: str,
        user_id: str,
        name: str | None = None,
        last_name: str | None = None,
        anonymous: bool = False,
    ) -> RoomUser:
        room_user = RoomUser(
            id=str(uuid.uuid4()),
            room_id=room_id,
            user_id=user_id,
            name=name,
            last_name=last_name,
            anonymous=anonymous,
            participant_id=None,
            joined_at=None,
        )
        self.db.add(room_user)
        self.db.flush()
        return room_user

    def find_by_id_for_update(self, room_user_id: str) -> RoomUser | None:
        """Load a membership row holding an exclusive lock until the transaction ends."""

        stmt = (
            select(RoomUser)
            .where(RoomUser.id == room_user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_user_id_and_room_id(self, user_id: str, room_id: str) -> RoomUser | None:
        stmt = select(RoomUser).where(RoomUser.user_id == user_id, RoomUser.room_id == room_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_all_by_room_id(self, room_id: str) -> list[RoomUser]:
        stmt = select(RoomUser).where(RoomUser.room_id == room_id).order_by(RoomUser.created_at, RoomUser.id)
        return list(self.db.execute(stmt).scalars().all())

    def count_by_room_id(self, room_id: str) -> int:
        stmt = select(func.count()).select_from(RoomUser).where(RoomUser.room_id == room_id)
        return int(self.db.execute(stmt).scalar_one())

    def update(self, room_user_id: str, **values: Any) -> int:
        result = self.db.execute(update(RoomUser).where(RoomUser.id == room_user_id).values(**values))
        return result.rowcount

    def delete_by_user_id_and_room_id(self, user_id: str, room_id: str) -> int:
        result = self.db.execute(
            delete(RoomUser).where(RoomUser.user_id == user_id, RoomUser.room_id == room_id)
        )
        return result.rowcount

    def delete_if_not_newer(self, room_user_id: str, participant_id: str, timestamp: datetime) -> int:
        """Delete a live membership unless it reconnected after ``timestamp``.

        Only the connection identified by ``participant_id`` whose ``joined_at``
        is not later than ``timestamp`` is removed.
        """

        result = self.db.execute(
            delete(RoomUser).where(
                RoomUser.id == room_user_id,
                RoomUser.participant_id == participant_id,
                RoomUser.joined_at <= timestamp,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
