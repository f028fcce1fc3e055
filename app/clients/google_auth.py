"""
Google OAuth utilities.

Covers the three calls of the authorization-code flow used by the gateway:
building the consent URL, exchanging the returned code, and revoking the
access token on logout. Refresh tokens are never requested.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from fastapi import status
from pydantic import ValidationError

from app.schemas.auth import TokenResponse


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class OAuthTokenRevocationError(Exception):
    """Raised when Google refuses to revoke an access token."""


class GoogleOAuthClient:
    """Build Google authorization URLs, exchange codes and revoke tokens."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    REVOKE_URL = "https://oauth2.googleapis.com/revoke"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def build_authorization_url(
        self, *, client_id: str, redirect_uri: str, scope: str, state: str
    ) -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": scope,
            "state": state,
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_code(
        self, *, client_id: str, client_secret: str, redirect_uri: str, code: str
    ) -> TokenResponse:
        """
        Exchange an authorization code for an access token.

        Google's error payload (``{"error": ..., "error_description": ...}``) is
        attached to the raised exception rather than discarded.
        """
        payload = {
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }

        try:
            async with self._client() as client:
                response = await client.post(self.TOKEN_URL, data=payload)
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"Token request failed: {exc}") from exc

        try:
            token_payload: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError(response.text, payload=response.text) from exc

        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError(
                "Unexpected token payload returned from Google.", payload=token_payload
            )
        if token_payload.get("error"):
            raise OAuthTokenExchangeError(str(token_payload["error"]), payload=token_payload)
        if response.is_error:
            raise OAuthTokenExchangeError(response.text, payload=token_payload)

        try:
            return TokenResponse.model_validate(token_payload)
        except ValidationError as exc:
            raise OAuthTokenExchangeError(
                "Incomplete token payload returned from Google.", payload=token_payload
            ) from exc

    async def revoke_token(self, access_token: str) -> None:
        """Revoke ``access_token``; anything but HTTP 200 is an error."""
        try:
            async with self._client() as client:
                response = await client.post(self.REVOKE_URL, data={"token": access_token})
        except httpx.HTTPError as exc:
            raise OAuthTokenRevocationError(f"Revocation request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenRevocationError(response.text)


__all__ = [
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
    "OAuthTokenRevocationError",
]
