"""Signed download URLs for user avatars stored in S3 compatible storage."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import boto3
from botocore.config import Config

from meet.config import Settings, get_settings

logger = logging.getLogger(__name__)


class AvatarService:
    def __init__(self, settings: Settings | None = None, *, client: Any | None = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def _s3_client(self) -> Any:
        if self._client is None:
            settings = self._settings
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.avatar_endpoint,
                region_name=settings.avatar_region,
                aws_access_key_id=settings.avatar_access_key,
                aws_secret_access_key=settings.avatar_secret_key,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path" if settings.avatar_force_path_style else "auto"},
                ),
            )
        return self._client

    def get_download_url(self, avatar_key: str) -> str:
        url = self._s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": self._settings.avatar_bucket, "Key": avatar_key},
            ExpiresIn=self._settings.avatar_url_expires_seconds,
        )
        rewrite = self._settings.avatar_endpoint_for_signed_urls
        if rewrite and self._settings.avatar_endpoint:
            return url.replace(self._settings.avatar_endpoint, rewrite)
        return url

    def get_download_urls(self, avatar_keys: Iterable[str]) -> dict[str, str]:
        """Sign each distinct key once and map it to its URL."""

        urls: dict[str, str] = {}
        for key in dict.fromkeys(avatar_keys):
            if key:
                urls[key] = self.get_download_url(key)
        return urls
