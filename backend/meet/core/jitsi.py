"""JaaS (Jitsi as a Service) token minting."""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from meet.config import Settings, get_settings

ANONYMOUS_NAME = "Anonymous"
ANONYMOUS_EMAIL = "anonymous@inxt.com"


@dataclass(slots=True)
class JitsiUser:
    """Identity embedded in the ``context.user`` claim of a JaaS token."""

    id: str
    name: str
    email: str


def jitsi_user_id(user_id: str, room_user_id: str) -> str:
    """Compose the ``<userId>/<roomUserId>`` id that JaaS echoes in webhooks."""

    return f"{user_id}/{room_user_id}"


def get_jitsi_private_key(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    return base64.b64decode(settings.jitsi_secret).decode("utf-8")


def get_jitsi_jwt_header(settings: Settings | None = None) -> dict[str, str]:
    settings = settings or get_settings()
    return {"alg": "RS256", "kid": settings.jitsi_api_key, "typ": "JWT"}


def get_jitsi_jwt_payload(
    user: JitsiUser | None,
    room: str,
    moderator: bool,
    *,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    return {
        "aud": "jitsi",
        "context": {
            "user": {
                "id": user.id if user else str(uuid.uuid4()),
                "name": user.name if user else "anonymous",
                "email": user.email if user else ANONYMOUS_EMAIL,
                "avatar": "",
                "moderator": moderator,
            },
            "features": {
                "livestreaming": False,
                "recording": False,
                "transcription": False,
                "outbound-call": False,
            },
        },
        "iss": "chat",
        "room": room,
        "sub": settings.jitsi_app_id,
        "exp": int((now + timedelta(seconds=settings.jitsi_token_ttl_seconds)).timestamp()),
        "nbf": int(now.timestamp()) - settings.jitsi_token_nbf_skew_seconds,
    }


def generate_jitsi_jwt(
    user: JitsiUser | None,
    room: str,
    moderator: bool,
    *,
    settings: Settings | None = None,
) -> str:
    """Sign a short-lived RS256 token granting access to ``room``."""

    settings = settings or get_settings()
    return jwt.encode(
        get_jitsi_jwt_payload(user, room, moderator, settings=settings),
        get_jitsi_private_key(settings),
        algorithm="RS256",
        headers=get_jitsi_jwt_header(settings),
    )
