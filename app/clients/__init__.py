"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBSessionStore
from .google_auth import GoogleOAuthClient, OAuthTokenExchangeError, OAuthTokenRevocationError
from .google_drive import DriveListingError, GoogleDriveClient
from .session_store import SessionStore, SessionStoreError
from .sqlite_store import SQLiteSessionStore

__all__ = [
    "DriveListingError",
    "DynamoDBSessionStore",
    "GoogleDriveClient",
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
    "OAuthTokenRevocationError",
    "SQLiteSessionStore",
    "SessionStore",
    "SessionStoreError",
]
