"""JaaS webhook payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meet.core.time import from_epoch_millis


class JitsiWebhookEvent(str, Enum):
    """Event types delivered by JaaS webhooks."""

    ROOM_CREATED = "ROOM_CREATED"
    ROOM_DESTROYED = "ROOM_DESTROYED"
    PARTICIPANT_JOINED = "PARTICIPANT_JOINED"
    PARTICIPANT_LEFT = "PARTICIPANT_LEFT"
    PARTICIPANT_JOINED_LOBBY = "PARTICIPANT_JOINED_LOBBY"
    PARTICIPANT_LEFT_LOBBY = "PARTICIPANT_LEFT_LOBBY"
    TRANSCRIPTION_UPLOADED = "TRANSCRIPTION_UPLOADED"
    TRANSCRIPTION_CHUNK_RECEIVED = "TRANSCRIPTION_CHUNK_RECEIVED"
    CHAT_UPLOADED = "CHAT_UPLOADED"
    RECORDING_STARTED = "RECORDING_STARTED"
    RECORDING_ENDED = "RECORDING_ENDED"
    RECORDING_UPLOADED = "RECORDING_UPLOADED"
    LIVE_STREAM_STARTED = "LIVE_STREAM_STARTED"
    LIVE_STREAM_ENDED = "LIVE_STREAM_ENDED"
    SETTINGS_PROVISIONING = "SETTINGS_PROVISIONING"
    SIP_CALL_IN_STARTED = "SIP_CALL_IN_STARTED"
    SIP_CALL_IN_ENDED = "SIP_CALL_IN_ENDED"
    SIP_CALL_OUT_STARTED = "SIP_CALL_OUT_STARTED"
    SIP_CALL_OUT_ENDED = "SIP_CALL_OUT_ENDED"
    FEEDBACK = "FEEDBACK"
    DIAL_IN_STARTED = "DIAL_IN_STARTED"
    DIAL_IN_ENDED = "DIAL_IN_ENDED"
    DIAL_OUT_STARTED = "DIAL_OUT_STARTED"
    DIAL_OUT_ENDED = "DIAL_OUT_ENDED"
    USAGE = "USAGE"
    SPEAKER_STATS = "SPEAKER_STATS"
    POLL_CREATED = "POLL_CREATED"
    POLL_ANSWER = "POLL_ANSWER"
    REACTIONS = "REACTIONS"
    AGGREGATED_REACTIONS = "AGGREGATED_REACTIONS"
    SCREEN_SHARING_HISTORY = "SCREEN_SHARING_HISTORY"
    VIDEO_SEGMENT_UPLOADED = "VIDEO_SEGMENT_UPLOADED"
    ROLE_CHANGED = "ROLE_CHANGED"
    RTCSTATS_UPLOADED = "RTCSTATS_UPLOADED"


class _WebhookModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class JitsiParticipantData(_WebhookModel):
    """``data`` block of PARTICIPANT_JOINED and PARTICIPANT_LEFT events."""

    id: str | None = Field(default=None, description="'<userId>/<roomUserId>' set in the JaaS token")
    participant_id: str = Field(..., min_length=1)
    participant_jid: str | None = None
    name: str | None = None
    email: str | None = None
    moderator: bool | str | None = None
    disconnect_reason: str | None = None


class JitsiParticipantWebhookPayload(_WebhookModel):
    event_type: str
    fqn: str = Field(..., description="'<appId>/<roomId>'")
    timestamp: int = Field(..., description="Event time in epoch milliseconds")
    data: JitsiParticipantData
    idempotency_key: str | None = None
    customer_id: str | None = None
    app_id: str | None = None
    session_id: str | None = None

    @property
    def occurred_at(self) -> datetime:
        return from_epoch_millis(self.timestamp)


class WebhookAck(BaseModel):
    success: bool = True
