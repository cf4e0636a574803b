"""Outbound calls to the conferencing provider."""

from __future__ import annotations

import logging

import httpx

from meet.config import Settings, get_settings
from meet.core.jitsi import JitsiUser, generate_jitsi_jwt

logger = logging.getLogger(__name__)


class JitsiApiClient:
    """Force-disconnects ("kicks") participants from a conference."""

    def __init__(self, settings: Settings | None = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def kick(self, room_id: str, participant_id: str) -> None:
        """Request the disconnection of ``participant_id``.

        Fire-and-forget: failures are logged and never raised to the caller.
        """

        if self._settings.jitsi_kick_url is None:
            logger.warning(
                "Kick endpoint not configured, participant %s stays in room %s",
                participant_id,
                room_id,
            )
            return

        try:
            token = generate_jitsi_jwt(
                JitsiUser(id="meet-server", name="Meet Server", email="meet-server@inxt.com"),
                room_id,
                True,
                settings=self._settings,
            )
            with httpx.Client(timeout=self._settings.jitsi_kick_timeout_seconds, transport=self._transport) as client:
                response = client.post(
                    str(self._settings.jitsi_kick_url),
                    json={"room": room_id, "participantId": participant_id},
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()
        except Exception:
            logger.exception(
                "Failed to kick participant",
                extra={"room_id": room_id, "participant_id": participant_id},
            )
            return

        logger.info("Kicked participant %s from room %s", participant_id, room_id)
