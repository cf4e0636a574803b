"""Call and room membership API endpoints."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import APIRouter, Body, Depends, HTTPException, status

from meet.api.deps import (
    get_call_service,
    get_current_user,
    get_optional_user,
    get_room_user_service,
    valid_room_id,
)
from meet.schemas import (
    AuthenticatedUser,
    CallRead,
    CreateCallResponse,
    JoinCallRequest,
    JoinCallResponse,
    LeaveCallRequest,
    RoomMemberRead,
)
from meet.services import CallService, RoomUserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/call", tags=["call"])


@contextmanager
def _internal_errors(operation: str, **context: Any) -> Iterator[None]:
    """Log unexpected failures with context and hide their details from the caller."""

    try:
        yield
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("[CALL/%s] unexpected error, context %s", operation, context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc


@router.post("", response_model=CreateCallResponse, status_code=status.HTTP_200_OK)
def create_call(
    current_user: AuthenticatedUser = Depends(get_current_user),
    calls: CallService = Depends(get_call_service),
) -> CreateCallResponse:
    """Create a room hosted by the caller and return a moderator JaaS token."""

    with _internal_errors("CREATE", user_id=current_user.uuid, email=current_user.email):
        return calls.create_call(current_user)


@router.get("/{room_id}", response_model=CallRead)
def get_call(
    room_id: str = Depends(valid_room_id),
    calls: CallService = Depends(get_call_service),
) -> CallRead:
    return calls.get_call(room_id)


@router.post("/{room_id}/users/join", response_model=JoinCallResponse)
def join_call(
    payload: JoinCallRequest | None = Body(default=None),
    room_id: str = Depends(valid_room_id),
    current_user: AuthenticatedUser | None = Depends(get_optional_user),
    calls: CallService = Depends(get_call_service),
) -> JoinCallResponse:
    """Admit the caller, or an anonymous guest, and return a participant token."""

    user_id = current_user.uuid if current_user else None
    with _internal_errors("JOIN", user_id=user_id, room_id=room_id):
        return calls.join_call(room_id, current_user, payload or JoinCallRequest())


@router.post("/{room_id}/users/leave", status_code=status.HTTP_200_OK)
def leave_call(
    payload: LeaveCallRequest | None = Body(default=None),
    room_id: str = Depends(valid_room_id),
    current_user: AuthenticatedUser | None = Depends(get_optional_user),
    calls: CallService = Depends(get_call_service),
) -> dict[str, bool]:
    """Remove the caller from the room; anonymous callers pass their ``userId``."""

    user_id = current_user.uuid if current_user else (payload.user_id if payload else None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user id is required to leave a call",
        )
    with _internal_errors("LEAVE", user_id=user_id, room_id=room_id):
        calls.leave_call(room_id, user_id)
    return {"success": True}


@router.get("/{room_id}/users", response_model=list[RoomMemberRead])
def list_call_users(
    room_id: str = Depends(valid_room_id),
    room_users: RoomUserService = Depends(get_room_user_service),
) -> list[RoomMemberRead]:
    """Return the members of a room with signed avatar URLs."""

    with _internal_errors("USERS", room_id=room_id):
        return room_users.get_members_with_avatars(room_id)
