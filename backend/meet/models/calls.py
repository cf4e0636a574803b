from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meet.models.base import Base

# Webhook ordering relies on millisecond timestamps, MySQL truncates to whole
# seconds unless the fractional precision is declared.
Timestamp = DateTime(timezone=True).with_variant(mysql.DATETIME(timezone=True, fsp=3), "mysql")

UUID_LENGTH = 36


class Room(Base):
    """Conference room backed by a JaaS conference of the same name."""

    __tablename__ = "rooms"
    __table_args__ = (Index("ix_rooms_host_id_is_closed", "host_id", "is_closed"),)

    id: Mapped[str] = mapped_column(String(UUID_LENGTH), primary_key=True)
    max_users_allowed: Mapped[int] = mapped_column(Integer, nullable=False)
    host_id: Mapped[str] = mapped_column(String(UUID_LENGTH), nullable=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    remove_at: Mapped[datetime | None] = mapped_column(Timestamp, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    members: Mapped[list["RoomUser"]] = relationship(
        back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )


class RoomUser(Base):
    """Membership of a user in a room, tracking the live JaaS connection."""

    __tablename__ = "room_users"
    __table_args__ = (
        UniqueConstraint("user_id", "room_id", name="uq_room_users_user_id_room_id"),
    )

    id: Mapped[str] = mapped_column(String(UUID_LENGTH), primary_key=True)
    room_id: Mapped[str] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE", onupdate="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(UUID_LENGTH), nullable=False)
    participant_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    joined_at: Mapped[datetime | None] = mapped_column(Timestamp, nullable=True)
    name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    room: Mapped[Room] = relationship(back_populates="members")


class User(Base):
    """Read-only view of the external user directory."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    uuid: Mapped[str] = mapped_column(String(UUID_LENGTH), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255))
    lastname: Mapped[str | None] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(String(512))
