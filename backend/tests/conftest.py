"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import base64
import sys
from pathlib import Path
from typing import Iterator

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from meet.api.deps import get_avatar_service, get_jitsi_api_client, get_payments_client
from meet.config import Settings, get_settings
from meet.database import get_db
from meet.main import app
from meet.models import Base
from meet.services.payments import Tier

TEST_APP_ID = "vpaas-magic-cookie-test"
TEST_JWT_SECRET = "test-secret-with-enough-entropy-for-hs256"


class FakePayments:
    """Stands in for the payments service."""

    def __init__(self, enabled: bool = True, pax_per_call: int = 5) -> None:
        self.enabled = enabled
        self.pax_per_call = pax_per_call
        self.requested: list[str] = []

    def get_user_tier(self, user_uuid: str) -> Tier:
        self.requested.append(user_uuid)
        return Tier.model_validate(
            {
                "id": "tier-test",
                "label": "Test tier",
                "featuresPerService": {
                    "meet": {"enabled": self.enabled, "paxPerCall": self.pax_per_call}
                },
            }
        )


class FakeJitsiApi:
    """Records kick requests instead of calling the provider."""

    def __init__(self) -> None:
        self.kicks: list[tuple[str, str]] = []

    def kick(self, room_id: str, participant_id: str) -> None:
        self.kicks.append((room_id, participant_id))


class FakeAvatarService:
    """Signs avatar keys into predictable URLs."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def get_download_urls(self, avatar_keys) -> dict[str, str]:
        keys = [key for key in dict.fromkeys(avatar_keys) if key]
        self.calls.append(keys)
        return {key: f"https://avatars.test/{key}?signed=1" for key in keys}


@pytest.fixture(scope="session")
def jitsi_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jitsi_public_key_pem(jitsi_private_key) -> bytes:
    return jitsi_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture(autouse=True)
def settings(monkeypatch, jitsi_private_key) -> Settings:
    """Point the cached settings at test credentials for the duration of a test."""

    pem = jitsi_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    current = get_settings()
    monkeypatch.setattr(current, "jwt_secret", TEST_JWT_SECRET)
    monkeypatch.setattr(current, "jitsi_app_id", TEST_APP_ID)
    monkeypatch.setattr(current, "jitsi_api_key", f"{TEST_APP_ID}/test-key")
    monkeypatch.setattr(current, "jitsi_secret", base64.b64encode(pem).decode("ascii"))
    monkeypatch.setattr(current, "jitsi_webhook_secret", None)
    monkeypatch.setattr(current, "jitsi_kick_url", None)
    monkeypatch.setattr(current, "room_expiration_days", 30)
    return current


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine for isolated tests."""

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return sessionmaker(bind=test_engine, future=True)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for unit tests."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture()
def jitsi_api() -> FakeJitsiApi:
    return FakeJitsiApi()


@pytest.fixture()
def avatars() -> FakeAvatarService:
    return FakeAvatarService()


@pytest.fixture()
def client(session_factory, payments, jitsi_api, avatars) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient with the database and external clients overridden."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payments_client] = lambda: payments
    app.dependency_overrides[get_jitsi_api_client] = lambda: jitsi_api
    app.dependency_overrides[get_avatar_service] = lambda: avatars
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
