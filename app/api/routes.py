"""
FastAPI routes for the Drive viewer gateway.

``/auth`` completes the Google login and mints a session; every other path is
behind :func:`app.api.session.require_session`, so callers without a live
session are redirected to Google before any routing decision (including 404).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Annotated, Any, Callable

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from app.api.session import (
    MalformedState,
    callback_uri,
    decode_state,
    expire_session_cookie,
    require_session,
    set_session_cookie,
)
from app.core.config import AppSettings
from app.dependencies import (
    get_app_settings,
    get_clock,
    get_credential_issuer,
    get_drive_client,
    get_google_oauth_client,
    get_session_store,
    get_task_tracker,
)
from app.models.session import ActiveSession, AuthState
from app.utils.tasks import BackgroundTaskTracker
from app.views.files import render_file_list

router = APIRouter()
logger = logging.getLogger(__name__)

MILLIS = 1000


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth")
async def handle_google_oauth_callback(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    store: Annotated[Any, Depends(get_session_store)],
    issuer: Annotated[Any, Depends(get_credential_issuer)],
    clock: Annotated[Callable[[], int], Depends(get_clock)],
    code: str | None = Query(default=None, description="Authorization code returned by Google."),
    state: str | None = Query(default=None, description="Request target encoded at login."),
    error: str | None = Query(default=None, description="Error reported by Google."),
) -> Response:
    """Exchange the code, create a session and send the browser back where it started."""
    if error is not None:
        logger.info("OAuth callback rejected (%s): %s", AuthState.CALLBACK_ERROR.value, error)
        return PlainTextResponse(
            f"Google OAuth error: [{error}]", status_code=HTTPStatus.BAD_REQUEST
        )

    if code is None:
        logger.info("OAuth callback rejected (%s)", AuthState.CALLBACK_MISSING_CODE.value)
        return PlainTextResponse(
            "Bad auth callback (no 'code')", status_code=HTTPStatus.BAD_REQUEST
        )

    try:
        target = decode_state(state)
    except MalformedState:
        logger.info("OAuth callback rejected (%s)", AuthState.CALLBACK_MALFORMED_STATE.value)
        return PlainTextResponse(
            "Bad auth callback (malformed 'state')", status_code=HTTPStatus.BAD_REQUEST
        )

    token = await oauth_client.exchange_code(
        client_id=settings.google.client_id,
        client_secret=settings.google.client_secret,
        redirect_uri=callback_uri(request, settings),
        code=code,
    )

    session_id = issuer.generate_auth()
    expiration_ms = int(clock()) + token.expires_in * MILLIS
    await store.save(session_id, token.access_token, expiration_ms // MILLIS)
    logger.info("Session created (%s), expires in %ss", AuthState.CALLBACK_VALID.value, token.expires_in)

    response = RedirectResponse(url=target, status_code=HTTPStatus.FOUND)
    set_session_cookie(
        response, session_id, datetime.fromtimestamp(expiration_ms / MILLIS, tz=timezone.utc)
    )
    return response


@router.get("/", response_class=HTMLResponse)
async def list_files(
    session: Annotated[ActiveSession, Depends(require_session)],
    drive_client: Annotated[Any, Depends(get_drive_client)],
    q: str | None = Query(default=None, description="Only files whose title contains q."),
) -> HTMLResponse:
    """Render the caller's Drive files."""
    files = await drive_client.list_files(session.access_token, q or None)
    return HTMLResponse(render_file_list(files, q))


@router.get("/logout")
async def logout(
    session: Annotated[ActiveSession, Depends(require_session)],
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    store: Annotated[Any, Depends(get_session_store)],
    tracker: Annotated[BackgroundTaskTracker, Depends(get_task_tracker)],
) -> Response:
    """Expire the cookie now; revoke and forget the token in the background."""
    tracker.spawn(_end_session(oauth_client, store, session), name="logout")

    response = PlainTextResponse("Logged out")
    expire_session_cookie(response)
    return response


@router.get("/{path:path}")
async def not_found(
    request: Request,
    session: Annotated[ActiveSession, Depends(require_session)],
) -> Response:
    logger.info("Not found %s", request.url.path)
    return PlainTextResponse("Not found", status_code=HTTPStatus.NOT_FOUND)


async def _end_session(oauth_client: Any, store: Any, session: ActiveSession) -> None:
    revoked, removed = await asyncio.gather(
        oauth_client.revoke_token(session.access_token),
        store.remove(session.session_id),
        return_exceptions=True,
    )
    if isinstance(revoked, Exception):
        logger.warning("Token revocation failed: %s", revoked)
    if isinstance(removed, Exception):
        logger.warning("Session removal failed: %s", removed)
    if not isinstance(revoked, Exception) and not isinstance(removed, Exception):
        logger.info("Session ended")


__all__ = ["router"]
