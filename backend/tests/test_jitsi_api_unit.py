"""Unit tests for participant kicks."""

from __future__ import annotations

import base64
import json

import httpx
import jwt
import pytest

from meet.services import JitsiApiClient

KICK_URL = "https://kick.test/v1/kick"


@pytest.fixture()
def kick_settings(settings, monkeypatch):
    monkeypatch.setattr(settings, "jitsi_kick_url", KICK_URL)
    return settings


def test_kick_posts_the_participant(kick_settings):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    JitsiApiClient(kick_settings, transport=httpx.MockTransport(handler)).kick("room-1", "p1")

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == KICK_URL
    assert json.loads(request.content) == {"room": "room-1", "participantId": "p1"}
    token = request.headers["Authorization"].removeprefix("Bearer ")
    assert jwt.get_unverified_header(token)["kid"] == kick_settings.jitsi_api_key


def test_kick_is_skipped_without_endpoint(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    JitsiApiClient(settings, transport=httpx.MockTransport(handler)).kick("room-1", "p1")


def test_kick_swallows_error_responses(kick_settings, caplog):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    JitsiApiClient(kick_settings, transport=transport).kick("room-1", "p1")

    assert "Failed to kick participant" in caplog.text


def test_kick_swallows_transport_errors(kick_settings, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    JitsiApiClient(kick_settings, transport=httpx.MockTransport(handler)).kick("room-1", "p1")

    assert "Failed to kick participant" in caplog.text


def test_kick_swallows_token_errors(kick_settings, monkeypatch, caplog):
    monkeypatch.setattr(kick_settings, "jitsi_secret", base64.b64encode(b"not a private key").decode("ascii"))
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    JitsiApiClient(kick_settings, transport=httpx.MockTransport(handler)).kick("room-1", "p1")

    assert requests == []
    assert "Failed to kick participant" in caplog.text
