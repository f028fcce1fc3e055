"""
Session store contract shared by the persistent backends.

A session maps an opaque identifier to a Google access token until an absolute
expiration (epoch seconds). Expiry is the store's job: once the instant has
passed, ``get`` answers ``None`` exactly as if the session never existed.
"""

from __future__ import annotations

from typing import Optional, Protocol


class SessionStoreError(Exception):
    """Raised when the backing store cannot be reached or rejects a call."""


class SessionStore(Protocol):
    async def save(self, session_id: str, token: str, expiration: int) -> None:
        """Persist ``session_id -> token``, replacing any previous mapping."""
        ...

    async def get(self, session_id: str) -> Optional[str]:
        """Return the token for a live session, otherwise ``None``."""
        ...

    async def remove(self, session_id: str) -> None:
        """Delete the mapping; unknown identifiers are ignored."""
        ...


def require_expiration(expiration: int) -> int:
    """Reject sessions that would never expire."""
    if expiration is None or int(expiration) <= 0:
        raise ValueError("Sessions must be saved with a positive expiration.")
    return int(expiration)


__all__ = ["SessionStore", "SessionStoreError", "require_expiration"]
