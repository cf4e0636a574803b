"""Client for the payments service that exposes subscription tiers."""

from __future__ import annotations

import logging
from datetime import timedelta

import httpx
from pydantic import BaseModel, ConfigDict, Field

from meet.config import Settings, get_settings
from meet.core.security import create_access_token

logger = logging.getLogger(__name__)


class MeetFeature(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    enabled: bool = False
    pax_per_call: int = Field(default=0, alias="paxPerCall")


class FeaturesPerService(BaseModel):
    model_config = ConfigDict(extra="ignore")

    meet: MeetFeature = Field(default_factory=MeetFeature)


class Tier(BaseModel):
    """Subset of the tier payload relevant to calls."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    label: str | None = None
    features_per_service: FeaturesPerService = Field(
        default_factory=FeaturesPerService, alias="featuresPerService"
    )


class PaymentsClient:
    """Fetch the caller's tier using a short-lived service token."""

    def __init__(self, settings: Settings | None = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def _service_token(self, user_uuid: str) -> str:
        return create_access_token(
            {"payload": {"uuid": user_uuid, "workspaces": {"owners": [user_uuid]}}},
            expires_delta=timedelta(minutes=5),
        )

    def get_user_tier(self, user_uuid: str) -> Tier:
        url = f"{self._settings.payments_url.rstrip('/')}/products/tier"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._service_token(user_uuid)}",
        }
        try:
            with httpx.Client(timeout=self._settings.payments_timeout_seconds, transport=self._transport) as client:
                response = client.get(url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Failed to retrieve user tier from payment service", extra={"user_id": user_uuid})
            raise
        return Tier.model_validate(response.json())
