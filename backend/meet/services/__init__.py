"""Application services."""

from .avatars import AvatarService
from .calls import CallService
from .jitsi_api import JitsiApiClient
from .payments import PaymentsClient, Tier
from .room_users import RoomUserService
from .rooms import RoomService
from .webhooks import JitsiWebhookService

__all__ = [
    "AvatarService",
    "CallService",
    "JitsiApiClient",
    "JitsiWebhookService",
    "PaymentsClient",
    "RoomService",
    "RoomUserService",
    "Tier",
]
