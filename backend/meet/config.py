from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Meet API", env="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", env="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=False, env="DEBUG", description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://127.0.0.1",
        ],
        env="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    db_user: str = Field(default="meet", env="DB_USER")
    db_password: str = Field(default="meet", env="DB_PASSWORD")
    db_host: str = Field(default="db", env="DB_HOST")
    db_port: int = Field(default=3306, env="DB_PORT")
    db_name: str = Field(default="meet", env="DB_NAME")

    jwt_secret: str = Field(
        default="changeme",
        env="JWT_SECRET",
        description="Shared secret used to verify caller tokens and sign payments requests.",
    )
    jwt_algorithm: str = Field(default="HS256", env="JWT_ALGORITHM")

    payments_url: str = Field(
        default="http://payments:8003",
        env="PAYMENTS_URL",
        description="Base URL of the payments service exposing user tiers.",
    )
    payments_timeout_seconds: float = Field(default=10.0, env="PAYMENTS_TIMEOUT_SECONDS")

    jitsi_app_id: str = Field(default="", env="JITSI_APP_ID", description="JaaS application identifier")
    jitsi_api_key: str = Field(default="", env="JITSI_API_KEY", description="JaaS API key id (JWT kid)")
    jitsi_secret: str = Field(
        default="",
        env="JITSI_SECRET",
        description="Base64 encoded PEM private key used to sign JaaS tokens.",
    )
    jitsi_token_ttl_seconds: int = Field(default=60, env="JITSI_TOKEN_TTL_SECONDS")
    jitsi_token_nbf_skew_seconds: int = Field(default=10, env="JITSI_TOKEN_NBF_SKEW_SECONDS")
    jitsi_webhook_secret: str | None = Field(
        default=None,
        env="JITSI_WEBHOOK_SECRET",
        description="Shared secret for x-jaas-signature validation. Validation is skipped when unset.",
    )
    jitsi_kick_url: AnyHttpUrl | None = Field(
        default=None,
        env="JITSI_KICK_URL",
        description="Endpoint that force-disconnects a participant from a conference.",
    )
    jitsi_kick_timeout_seconds: float = Field(default=10.0, env="JITSI_KICK_TIMEOUT_SECONDS")
    jitsi_webhook_participant_left_enabled: bool = Field(
        default=True,
        env="JITSI_WEBHOOK_PARTICIPANT_LEFT_ENABLED",
        description="Process PARTICIPANT_LEFT webhooks. When disabled memberships are only removed by explicit leaves.",
    )

    room_expiration_days: int = Field(
        default=30,
        env="ROOM_EXPIRATION_DAYS",
        description="Days a room lives after its first confirmed connection.",
    )

    avatar_endpoint: str | None = Field(default=None, env="AVATAR_ENDPOINT")
    avatar_region: str | None = Field(default=None, env="AVATAR_REGION")
    avatar_access_key: str | None = Field(default=None, env="AVATAR_ACCESS_KEY")
    avatar_secret_key: str | None = Field(default=None, env="AVATAR_SECRET_KEY")
    avatar_bucket: str = Field(default="avatars", env="AVATAR_BUCKET")
    avatar_force_path_style: bool = Field(default=False, env="AVATAR_FORCE_PATH_STYLE")
    avatar_endpoint_for_signed_urls: str | None = Field(
        default=None,
        env="AVATAR_ENDPOINT_FOR_SIGNED_URLS",
        description="Public endpoint substituted into signed avatar URLs.",
    )
    avatar_url_expires_seconds: int = Field(default=24 * 3600, env="AVATAR_URL_EXPIRES_SECONDS")

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("jitsi_webhook_secret", "jitsi_kick_url", "avatar_endpoint_for_signed_urls", mode="before")
    @classmethod
    def blank_as_none(cls, value: str | None) -> str | None:
        if value in (None, "", Ellipsis):
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
