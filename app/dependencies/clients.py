"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Each factory can be swapped through ``app.dependency_overrides`` (see
``app.main.create_app``), which is how tests substitute in-memory fakes.
"""

import time
from functools import lru_cache
from typing import Callable

from fastapi import Request

from app.clients import (
    DynamoDBSessionStore,
    GoogleDriveClient,
    GoogleOAuthClient,
    SessionStore,
    SQLiteSessionStore,
)
from app.core.config import get_settings
from app.services import CredentialIssuer, SecretsCredentialIssuer, TokenCipherService
from app.utils.tasks import BackgroundTaskTracker


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    return GoogleOAuthClient()


@lru_cache()
def get_drive_client() -> GoogleDriveClient:
    """Provide Google Drive client instance."""
    return GoogleDriveClient()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.google.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_session_store() -> SessionStore:
    """Provide the configured session backend."""
    settings = _settings()
    if settings.session.backend == "sqlite":
        return SQLiteSessionStore(
            settings.session.sqlite_path, token_cipher=get_token_cipher_service()
        )
    return DynamoDBSessionStore(settings.aws, token_cipher=get_token_cipher_service())


@lru_cache()
def get_credential_issuer() -> CredentialIssuer:
    """Provide the session identifier generator."""
    return SecretsCredentialIssuer()


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


def get_clock() -> Callable[[], int]:
    """Provide the wall clock in epoch milliseconds."""
    return _now_millis


def get_task_tracker(request: Request) -> BackgroundTaskTracker:
    """Return the tracker owned by the running application."""
    return request.app.state.task_tracker


__all__ = [
    "get_clock",
    "get_credential_issuer",
    "get_drive_client",
    "get_google_oauth_client",
    "get_session_store",
    "get_task_tracker",
    "get_token_cipher_service",
]
