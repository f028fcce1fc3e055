"""
Application configuration models and helpers.

Centralizes settings management so the request router, the session store
backends and the environment check script share one configuration surface.
Values are read once per process and are immutable afterwards.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.metadata.readonly"

_SETTINGS_CONFIG = SettingsConfigDict(extra="ignore", populate_by_name=True)


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GoogleSettings(BaseSettings):
    """Credentials of the Google OAuth client."""

    model_config = _SETTINGS_CONFIG

    client_id: str = Field(..., validation_alias="GOOGLE_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GOOGLE_CLIENT_SECRET")


class AWSSettings(BaseSettings):
    """Settings for the DynamoDB session table."""

    model_config = _SETTINGS_CONFIG

    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    dynamodb_table_name: str = Field(
        "drive-viewer-sessions",
        validation_alias="DYNAMODB_TABLE_NAME",
        description="Table keyed by (pk, sk) with TTL enabled on 'expires_at'.",
    )


class SessionSettings(BaseSettings):
    """Where sessions live and how detached session work is wound down."""

    model_config = _SETTINGS_CONFIG

    backend: Literal["dynamodb", "sqlite"] = Field(
        "dynamodb", validation_alias="SESSION_BACKEND"
    )
    sqlite_path: str = Field(
        "data/sessions.db",
        validation_alias="SESSION_SQLITE_PATH",
        description="Database file used by the sqlite backend.",
    )
    background_drain_seconds: float = Field(
        5.0,
        validation_alias="BACKGROUND_DRAIN_SECONDS",
        description="Grace period given to pending logout tasks on shutdown.",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = _SETTINGS_CONFIG

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _SETTINGS_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    is_local: bool = Field(
        False,
        validation_alias="APP_LOCAL",
        description="When true, URLs are built against local_origin instead of the request.",
    )
    local_origin: str = Field("http://127.0.0.1:8000", validation_alias="APP_LOCAL_ORIGIN")
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    aws: AWSSettings = Field(default_factory=AWSSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator("local_origin")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        """Origins never carry a path, so ``http://host/`` becomes ``http://host``."""
        return value.rstrip("/")


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AWSSettings",
    "DRIVE_SCOPE",
    "GoogleSettings",
    "SecuritySettings",
    "SessionSettings",
    "get_settings",
]
