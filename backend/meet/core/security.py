"""Security helpers for caller tokens and JaaS webhook signatures."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

import jwt
from fastapi import HTTPException, status

from meet.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

JAAS_SIGNATURE_HEADER = "x-jaas-signature"


def create_access_token(data: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT with an expiration time using the shared secret."""

    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta is not None else timedelta(minutes=5)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate a caller JWT issued by the identity provider."""

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:  # pragma: no cover - simple error mapping
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired") from exc
    except jwt.InvalidTokenError as exc:  # pragma: no cover - simple error mapping
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc
    return payload


def serialize_webhook_payload(payload: Mapping[str, Any]) -> str:
    """Serialise a webhook payload the way JaaS does before signing it."""

    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def sign_webhook_payload(payload: Mapping[str, Any], timestamp: int | str, secret: str) -> str:
    """Return the base64 HMAC-SHA256 of ``"<timestamp>.<payload>"``."""

    signed_payload = f"{timestamp}.{serialize_webhook_payload(payload)}"
    digest = hmac.new(secret.encode("utf-8"), signed_payload.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def _parse_signature_header(header: str) -> tuple[str | None, str | None]:
    timestamp: str | None = None
    signature: str | None = None
    for part in header.split(","):
        prefix, _, value = part.strip().partition("=")
        if prefix == "t" and value:
            timestamp = value
        elif prefix == "v1" and value:
            signature = value
    return timestamp, signature


def verify_jaas_signature(
    headers: Mapping[str, str],
    payload: Mapping[str, Any] | None,
    secret: str | None = None,
) -> bool:
    """Validate the ``x-jaas-signature`` header of a webhook request.

    The header carries ``t=<unix-seconds>,v1=<base64 signature>``. When no
    secret is configured the check is skipped and the request is accepted.
    """

    if secret is None:
        secret = settings.jitsi_webhook_secret
    if not secret:
        logger.warning("Webhook secret not configured, skipping validation")
        return True

    header = headers.get(JAAS_SIGNATURE_HEADER)
    if not header:
        logger.warning("No JaaS signature found in headers")
        return False

    if not payload:
        logger.warning("No payload provided for signature validation")
        return False

    timestamp, signature = _parse_signature_header(header)
    if not timestamp or not signature:
        logger.warning("Invalid JaaS signature format")
        return False

    try:
        provided = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("JaaS signature is not valid base64")
        return False

    try:
        expected = base64.b64decode(sign_webhook_payload(payload, timestamp, secret))
    except (UnicodeEncodeError, ValueError):
        logger.warning("Webhook payload cannot be serialised for signature validation")
        return False
    return hmac.compare_digest(provided, expected)
