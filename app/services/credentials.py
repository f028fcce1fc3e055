"""Issuing of opaque session identifiers."""

from __future__ import annotations

import secrets
from typing import Protocol

SESSION_ID_BYTES = 32


class CredentialIssuer(Protocol):
    """Source of session identifiers."""

    def generate_auth(self) -> str:
        ...


class SecretsCredentialIssuer:
    """Draw session identifiers from the operating system CSPRNG.

    Identifiers are URL-safe base64 so they can be used verbatim as a cookie
    value and as a storage key.
    """

    def __init__(self, *, nbytes: int = SESSION_ID_BYTES) -> None:
        if nbytes < 16:
            raise ValueError("Session identifiers need at least 128 bits of entropy.")
        self._nbytes = nbytes

    def generate_auth(self) -> str:
        return secrets.token_urlsafe(self._nbytes)


__all__ = ["CredentialIssuer", "SecretsCredentialIssuer", "SESSION_ID_BYTES"]
