"""Database models package."""

from .base import Base
from .calls import Room, RoomUser, User

__all__ = [
    "Base",
    "Room",
    "RoomUser",
    "User",
]
