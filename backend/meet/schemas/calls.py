"""Schemas for calls, rooms and their members."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names to API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AuthenticatedUser(BaseModel):
    """Caller identity carried in the ``payload`` claim of the bearer token."""

    model_config = ConfigDict(extra="ignore")

    uuid: str
    email: str | None = None
    name: str | None = None
    lastname: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.name, self.lastname) if part)


class CreateCallResponse(CamelModel):
    token: str
    room: str = Field(..., description="The room uuid")
    pax_per_call: int = Field(..., description="Maximum participants allowed by the host tier")
    app_id: str = Field(..., description="JaaS application id used by clients to connect")


class JoinCallRequest(CamelModel):
    name: str | None = Field(default=None, max_length=255, description="Optional first name of the joining user")
    last_name: str | None = Field(default=None, max_length=255, description="Optional last name of the joining user")
    anonymous: bool = Field(default=False, description="Whether the user is joining anonymously")


class JoinCallResponse(CamelModel):
    token: str
    room: str
    user_id: str = Field(..., description="Identity used for the membership, generated for anonymous users")
    app_id: str


class LeaveCallRequest(CamelModel):
    user_id: str | None = Field(default=None, description="Membership identity of an anonymous user")


class CallRead(CamelModel):
    """Room data returned to clients."""

    id: str
    max_users_allowed: int
    is_closed: bool
    remove_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoomMemberRead(CamelModel):
    id: str
    name: str | None = None
    last_name: str | None = None
    anonymous: bool = False
    avatar: str | None = None
