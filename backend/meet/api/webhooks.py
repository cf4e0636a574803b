"""JaaS webhook ingress."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import ValidationError

from meet.api.deps import get_webhook_service
from meet.core.security import verify_jaas_signature
from meet.schemas import WebhookAck
from meet.services import JitsiWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/jitsi", response_model=WebhookAck)
def handle_jitsi_webhook(
    request: Request,
    payload: dict[str, Any] = Body(...),
    webhooks: JitsiWebhookService = Depends(get_webhook_service),
) -> WebhookAck:
    """Authenticate and process a JaaS webhook event.

    Unknown rooms or memberships are acknowledged; only unexpected failures
    answer 400 so that JaaS may retry the delivery.
    """

    event_type = payload.get("eventType")
    logger.info("Received webhook event: %s", event_type)

    if not verify_jaas_signature(request.headers, payload):
        logger.warning("Invalid webhook request")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook request")

    if not event_type:
        logger.warning("Invalid payload: missing eventType")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload: missing eventType")

    try:
        webhooks.handle_event(payload)
    except ValidationError as exc:
        logger.warning("Invalid %s payload: %s", event_type, exc.errors())
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook payload"
        ) from exc
    except Exception as exc:
        logger.exception("Error processing webhook event %s", event_type)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Error processing webhook event"
        ) from exc

    return WebhookAck(success=True)
