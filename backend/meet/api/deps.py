"""FastAPI dependencies for the API layer.

Services are assembled per request from the request's database session and
the process-wide external clients, which tests replace through
``app.dependency_overrides``.
"""

import uuid
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from meet.core.security import decode_access_token
from meet.database import get_db
from meet.repositories import RoomRepository, RoomUserRepository, UserRepository
from meet.schemas import AuthenticatedUser
from meet.services import (
    AvatarService,
    CallService,
    JitsiApiClient,
    JitsiWebhookService,
    PaymentsClient,
    RoomService,
    RoomUserService,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_user_from_token(token: str) -> AuthenticatedUser:
    """Resolve the caller from a bearer token or raise an HTTP 401 error."""

    payload = decode_access_token(token)
    claims = payload.get("payload")
    if not isinstance(claims, dict):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    try:
        return AuthenticatedUser.model_validate(claims)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from None


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> AuthenticatedUser:
    """Retrieve the authenticated caller from the JWT token."""

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return get_user_from_token(token)


def get_optional_user(token: str | None = Depends(oauth2_scheme)) -> AuthenticatedUser | None:
    """Like :func:`get_current_user` but anonymous callers and bad tokens yield ``None``."""

    if not token:
        return None
    try:
        return get_user_from_token(token)
    except HTTPException:
        return None


def valid_room_id(room_id: str) -> str:
    """Reject path values that are not UUIDs with HTTP 400."""

    try:
        uuid.UUID(room_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Value of 'room_id' is not a valid UUID.",
        ) from None
    return room_id


@lru_cache
def get_payments_client() -> PaymentsClient:
    return PaymentsClient()


@lru_cache
def get_jitsi_api_client() -> JitsiApiClient:
    return JitsiApiClient()


@lru_cache
def get_avatar_service() -> AvatarService:
    return AvatarService()


def get_room_service(db: Session = Depends(get_db)) -> RoomService:
    return RoomService(RoomRepository(db))


def get_room_user_service(
    db: Session = Depends(get_db),
    room_service: RoomService = Depends(get_room_service),
    avatars: AvatarService = Depends(get_avatar_service),
) -> RoomUserService:
    return RoomUserService(RoomUserRepository(db), room_service, UserRepository(db), avatars)


def get_call_service(
    room_service: RoomService = Depends(get_room_service),
    room_user_service: RoomUserService = Depends(get_room_user_service),
    payments: PaymentsClient = Depends(get_payments_client),
) -> CallService:
    return CallService(room_service, room_user_service, payments)


def get_webhook_service(
    db: Session = Depends(get_db),
    room_service: RoomService = Depends(get_room_service),
    jitsi_api: JitsiApiClient = Depends(get_jitsi_api_client),
) -> JitsiWebhookService:
    return JitsiWebhookService(room_service, RoomUserRepository(db), jitsi_api)
