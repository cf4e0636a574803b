"""Pydantic schemas for API payloads."""

from .calls import (
    AuthenticatedUser,
    CallRead,
    CreateCallResponse,
    JoinCallRequest,
    JoinCallResponse,
    LeaveCallRequest,
    RoomMemberRead,
)
from .webhooks import (
    JitsiParticipantData,
    JitsiParticipantWebhookPayload,
    JitsiWebhookEvent,
    WebhookAck,
)

__all__ = [
    "AuthenticatedUser",
    "CallRead",
    "CreateCallResponse",
    "JoinCallRequest",
    "JoinCallResponse",
    "LeaveCallRequest",
    "RoomMemberRead",
    "JitsiParticipantData",
    "JitsiParticipantWebhookPayload",
    "JitsiWebhookEvent",
    "WebhookAck",
]
