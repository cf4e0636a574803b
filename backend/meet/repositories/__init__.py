"""Repositories exposing the query shapes used by the services."""

from .room_users import RoomUserRepository
from .rooms import RoomRepository
from .users import UserRepository

__all__ = ["RoomRepository", "RoomUserRepository", "UserRepository"]
