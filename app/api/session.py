"""
Session gate shared by the authenticated routes.

Resolves the ``auth`` cookie to a live session or, failing that, sends the
browser to Google with the original request target carried in ``state``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any
from urllib.parse import quote, unquote

from fastapi import Depends, Request, Response

from app.core.config import DRIVE_SCOPE, AppSettings
from app.dependencies import get_app_settings, get_google_oauth_client, get_session_store
from app.models.session import ActiveSession, AuthState

logger = logging.getLogger(__name__)

AUTH_COOKIE = "auth"
CALLBACK_PATH = "/auth"
DELETED = "deleted"
EXPIRED = datetime.fromtimestamp(0, tz=timezone.utc)


class LoginRedirect(Exception):
    """Short-circuits a request that has no usable session."""

    def __init__(self, location: str, state: AuthState) -> None:
        super().__init__(location)
        self.location = location
        self.state = state


class MalformedState(ValueError):
    """The callback's ``state`` does not decode to a local request target."""


def request_origin(request: Request, settings: AppSettings) -> str:
    """Scheme and host the browser used, or the configured local origin."""
    if settings.is_local:
        return settings.local_origin
    return f"{request.url.scheme}://{request.url.netloc}"


def callback_uri(request: Request, settings: AppSettings) -> str:
    return request_origin(request, settings) + CALLBACK_PATH


def encode_state(request: Request) -> str:
    """Percent-encode the request target minus its leading slashes.

    ``/`` + the decoded value reproduces the requested path and query. Runs of
    leading slashes collapse to one so the target never leaves the site.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
    target = path.lstrip("/\\")
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return quote(target, safe="")


def decode_state(state: str | None) -> str:
    """Turn the echoed ``state`` back into a same-site redirect target."""
    if not state:
        return "/"
    try:
        target = unquote(state, errors="strict")
    except UnicodeDecodeError as exc:
        raise MalformedState(state) from exc
    if target.startswith(("/", "\\")):
        raise MalformedState(state)
    return "/" + target


def set_session_cookie(response: Response, value: str, expires: datetime) -> None:
    response.set_cookie(
        AUTH_COOKIE,
        value,
        expires=expires,
        path="/",
        secure=True,
        httponly=True,
        samesite="lax",
    )


def expire_session_cookie(response: Response) -> None:
    set_session_cookie(response, DELETED, EXPIRED)


async def require_session(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    store: Annotated[Any, Depends(get_session_store)],
) -> ActiveSession:
    """Return the caller's session or raise :class:`LoginRedirect`."""

    def login(state: AuthState) -> LoginRedirect:
        logger.debug("Redirecting %s to login (%s)", request.url.path, state.value)
        location = oauth_client.build_authorization_url(
            client_id=settings.google.client_id,
            redirect_uri=callback_uri(request, settings),
            scope=DRIVE_SCOPE,
            state=encode_state(request),
        )
        return LoginRedirect(location, state)

    if not request.headers.get("cookie"):
        raise login(AuthState.NO_COOKIE)

    session_id = request.cookies.get(AUTH_COOKIE)
    if not session_id:
        raise login(AuthState.COOKIE_PRESENT_NO_SESSION)

    token = await store.get(session_id)
    if not token:
        raise login(AuthState.COOKIE_PRESENT_NO_SESSION)

    return ActiveSession(session_id=session_id, access_token=token)


__all__ = [
    "AUTH_COOKIE",
    "CALLBACK_PATH",
    "DELETED",
    "EXPIRED",
    "LoginRedirect",
    "MalformedState",
    "callback_uri",
    "decode_state",
    "encode_state",
    "expire_session_cookie",
    "request_origin",
    "require_session",
    "set_session_cookie",
]
