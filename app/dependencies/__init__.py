"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_clock,
    get_credential_issuer,
    get_drive_client,
    get_google_oauth_client,
    get_session_store,
    get_task_tracker,
    get_token_cipher_service,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_app_settings",
    "get_clock",
    "get_credential_issuer",
    "get_drive_client",
    "get_google_oauth_client",
    "get_session_store",
    "get_task_tracker",
    "get_token_cipher_service",
]
