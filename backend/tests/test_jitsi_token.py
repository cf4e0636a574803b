"""Tests for JaaS token minting."""

from __future__ import annotations

from datetime import datetime, timezone

import jwt

from meet.core.jitsi import (
    ANONYMOUS_EMAIL,
    JitsiUser,
    generate_jitsi_jwt,
    get_jitsi_jwt_payload,
    jitsi_user_id,
)


def test_token_is_signed_with_the_jaas_key(settings, jitsi_public_key_pem):
    user = JitsiUser(id=jitsi_user_id("user-1", "member-1"), name="Ada Lovelace", email="ada@example.com")

    token = generate_jitsi_jwt(user, "room-1", True)

    header = jwt.get_unverified_header(token)
    assert header["alg"] == "RS256"
    assert header["kid"] == settings.jitsi_api_key
    assert header["typ"] == "JWT"

    claims = jwt.decode(token, jitsi_public_key_pem, algorithms=["RS256"], audience="jitsi")
    assert claims["iss"] == "chat"
    assert claims["sub"] == settings.jitsi_app_id
    assert claims["room"] == "room-1"
    assert claims["context"]["user"] == {
        "id": "user-1/member-1",
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "avatar": "",
        "moderator": True,
    }


def test_token_lifetime_and_features(settings):
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    payload = get_jitsi_jwt_payload(None, "room-1", False, settings=settings, now=now)

    assert payload["exp"] == int(now.timestamp()) + 60
    assert payload["nbf"] == int(now.timestamp()) - 10
    assert payload["context"]["features"] == {
        "livestreaming": False,
        "recording": False,
        "transcription": False,
        "outbound-call": False,
    }
    assert payload["context"]["user"]["moderator"] is False
    assert payload["context"]["user"]["email"] == ANONYMOUS_EMAIL
