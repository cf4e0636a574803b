"""Reconciliation of JaaS participant webhooks with room memberships.

JaaS delivers webhooks at least once and in no particular order. Ordering is
derived from the ``timestamp`` of each event, compared with the ``joined_at``
stored on the membership row, which is read under ``SELECT ... FOR UPDATE``.

A membership row moves through three states::

    pending  participant_id = NULL, joined_at = NULL   admitted by the join call
    live     participant_id = <id>, joined_at = <ts>   confirmed by PARTICIPANT_JOINED
    removed  row deleted                               confirmed by PARTICIPANT_LEFT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from meet.config import Settings, get_settings
from meet.core.time import as_utc
from meet.database import transaction
from meet.repositories import RoomUserRepository
from meet.schemas.webhooks import JitsiParticipantWebhookPayload, JitsiWebhookEvent
from meet.services.jitsi_api import JitsiApiClient
from meet.services.rooms import RoomService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ParticipantRef:
    """Identifiers carried by a participant webhook."""

    room_id: str | None
    user_id: str | None
    room_user_id: str | None
    participant_id: str
    occurred_at: datetime


@dataclass(slots=True)
class JoinOutcome:
    """Result of applying a PARTICIPANT_JOINED event to a membership row."""

    updated: bool = False
    kick_participant_id: str | None = None


def extract_room_id(fqn: str | None) -> str | None:
    """Return the room id from a JaaS fully qualified name ``<appId>/<roomId>``."""

    if not fqn:
        return None
    parts = fqn.split("/")
    if len(parts) < 2:
        return None
    return parts[-1] or None


def extract_user_ids(context_user_id: str | None) -> tuple[str | None, str | None]:
    """Split the ``<userId>/<roomUserId>`` id embedded in the JaaS token."""

    if not context_user_id:
        return None, None
    user_id, _, room_user_id = context_user_id.partition("/")
    return user_id or None, room_user_id or None


def parse_participant_ref(payload: JitsiParticipantWebhookPayload) -> ParticipantRef:
    user_id, room_user_id = extract_user_ids(payload.data.id)
    return ParticipantRef(
        room_id=extract_room_id(payload.fqn),
        user_id=user_id,
        room_user_id=room_user_id,
        participant_id=payload.data.participant_id,
        occurred_at=payload.occurred_at,
    )


def resolve_connection(
    stored_participant_id: str | None,
    stored_joined_at: datetime | None,
    participant_id: str,
    occurred_at: datetime,
) -> JoinOutcome:
    """Decide how a PARTICIPANT_JOINED event applies to the stored connection.

    * first connection, or an event newer than the stored one: the event wins
      and a different, previously stored connection is kicked;
    * an older event for another connection: the row is kept and the
      incoming connection is kicked;
    * a redelivery of the stored connection: nothing to do.
    """

    first_connection = stored_joined_at is None and stored_participant_id is None
    is_newer = stored_joined_at is not None and occurred_at > as_utc(stored_joined_at)

    if first_connection or is_newer:
        kick = None
        if is_newer and stored_participant_id and stored_participant_id != participant_id:
            kick = stored_participant_id
        return JoinOutcome(updated=True, kick_participant_id=kick)

    if stored_participant_id == participant_id:
        return JoinOutcome()
    return JoinOutcome(kick_participant_id=participant_id)


class JitsiWebhookService:
    def __init__(
        self,
        room_service: RoomService,
        room_users: RoomUserRepository,
        jitsi_api: JitsiApiClient,
        settings: Settings | None = None,
    ) -> None:
        self.room_service = room_service
        self.room_users = room_users
        self.jitsi_api = jitsi_api
        self.db = room_users.db
        self._settings = settings or get_settings()

    def handle_event(self, payload: Mapping[str, Any]) -> None:
        """Dispatch a raw, already authenticated, webhook payload."""

        event_type = payload.get("eventType")
        if event_type == JitsiWebhookEvent.PARTICIPANT_JOINED.value:
            self.handle_participant_joined(JitsiParticipantWebhookPayload.model_validate(payload))
        elif event_type == JitsiWebhookEvent.PARTICIPANT_LEFT.value:
            self.handle_participant_left(JitsiParticipantWebhookPayload.model_validate(payload))
        else:
            logger.warning("Ignoring unhandled event type %s", event_type)

    def handle_participant_joined(self, payload: JitsiParticipantWebhookPayload) -> JoinOutcome:
        ref = parse_participant_ref(payload)
        try:
            logger.info(
                "Handling PARTICIPANT_JOINED for room %s user %s participant %s",
                ref.room_id,
                ref.user_id,
                ref.participant_id,
            )
            outcome = self._apply_joined(ref)
        except Exception:
            logger.exception(
                "Error handling PARTICIPANT_JOINED event",
                extra={"room_id": ref.room_id, "user_id": ref.user_id, "operation": "participant_joined"},
            )
            raise

        if outcome.kick_participant_id and ref.room_id:
            logger.info(
                "Kicking participant %s of user %s from room %s",
                outcome.kick_participant_id,
                ref.user_id,
                ref.room_id,
            )
            self.jitsi_api.kick(ref.room_id, outcome.kick_participant_id)
        return outcome

    def _apply_joined(self, ref: ParticipantRef) -> JoinOutcome:
        if not ref.room_id:
            logger.warning("Could not extract room id from PARTICIPANT_JOINED event")
            return JoinOutcome()

        room = self.room_service.get_room_by_id(ref.room_id)
        if room is None:
            logger.warning("Room %s not found for PARTICIPANT_JOINED", ref.room_id)
            return JoinOutcome()

        if room.remove_at is None:
            self.room_service.set_expiration_if_unset(room.id)
        elif self.room_service.is_expired(room):
            logger.warning("Room %s expired, removing it instead of registering the connection", room.id)
            self.room_service.remove_room(room.id)
            return JoinOutcome()

        if not ref.room_user_id:
            logger.warning("Could not extract membership id from PARTICIPANT_JOINED for room %s", room.id)
            return JoinOutcome()

        with transaction(self.db):
            room_user = self.room_users.find_by_id_for_update(ref.room_user_id)
            if room_user is None:
                logger.warning("Membership %s not found in room %s", ref.room_user_id, room.id)
                return JoinOutcome()

            outcome = resolve_connection(
                room_user.participant_id,
                room_user.joined_at,
                ref.participant_id,
                ref.occurred_at,
            )
            if outcome.updated:
                self.room_users.update(
                    room_user.id,
                    participant_id=ref.participant_id,
                    joined_at=ref.occurred_at,
                )

        if outcome.updated:
            logger.info("Membership %s is live with participant %s", ref.room_user_id, ref.participant_id)
        elif outcome.kick_participant_id is None:
            logger.info("Duplicate PARTICIPANT_JOINED for membership %s ignored", ref.room_user_id)
        return outcome

    def handle_participant_left(self, payload: JitsiParticipantWebhookPayload) -> int:
        if not self._settings.jitsi_webhook_participant_left_enabled:
            logger.info("PARTICIPANT_LEFT handling is disabled, event ignored")
            return 0

        ref = parse_participant_ref(payload)
        try:
            logger.info(
                "Handling PARTICIPANT_LEFT for room %s user %s participant %s",
                ref.room_id,
                ref.user_id,
                ref.participant_id,
            )
            return self._apply_left(ref)
        except Exception:
            logger.exception(
                "Error handling PARTICIPANT_LEFT event",
                extra={"room_id": ref.room_id, "user_id": ref.user_id, "operation": "participant_left"},
            )
            raise

    def _apply_left(self, ref: ParticipantRef) -> int:
        if not ref.room_id:
            logger.warning("Could not extract room id from PARTICIPANT_LEFT event")
            return 0

        room = self.room_service.get_room_by_id(ref.room_id)
        if room is None:
            logger.warning("Room %s not found for PARTICIPANT_LEFT", ref.room_id)
            return 0

        deleted = 0
        if ref.room_user_id:
            with transaction(self.db):
                deleted = self.room_users.delete_if_not_newer(
                    ref.room_user_id, ref.participant_id, ref.occurred_at
                )
        if not deleted:
            logger.info(
                "PARTICIPANT_LEFT for membership %s did not match the live connection", ref.room_user_id
            )

        if deleted and ref.user_id == room.host_id:
            self.room_service.close_room(room.id)

        if self.room_users.count_by_room_id(room.id) == 0:
            self.room_service.remove_room(room.id)

        logger.info("Processed PARTICIPANT_LEFT for user %s in room %s", ref.user_id, room.id)
        return deleted
