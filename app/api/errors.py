"""
Translate failures that escape the routes into HTTP responses.

Provider failures become 502, session store outages 503. Nothing is retried.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from app.api.session import LoginRedirect
from app.clients import DriveListingError, OAuthTokenExchangeError, SessionStoreError

logger = logging.getLogger(__name__)


async def _login_redirect(request: Request, exc: LoginRedirect) -> RedirectResponse:
    return RedirectResponse(url=exc.location, status_code=HTTPStatus.FOUND)


async def _token_exchange_failed(request: Request, exc: OAuthTokenExchangeError) -> PlainTextResponse:
    logger.error("Google token exchange failed: %s", exc.payload or exc)
    return PlainTextResponse(
        "Bad gateway: Google token exchange failed", status_code=HTTPStatus.BAD_GATEWAY
    )


async def _listing_failed(request: Request, exc: DriveListingError) -> PlainTextResponse:
    logger.error("Google Drive listing failed: %s", exc)
    return PlainTextResponse(
        "Bad gateway: Google Drive listing failed", status_code=HTTPStatus.BAD_GATEWAY
    )


async def _store_unavailable(request: Request, exc: SessionStoreError) -> PlainTextResponse:
    logger.exception("Session store unavailable", exc_info=exc)
    return PlainTextResponse(
        "Session store unavailable", status_code=HTTPStatus.SERVICE_UNAVAILABLE
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LoginRedirect, _login_redirect)
    app.add_exception_handler(OAuthTokenExchangeError, _token_exchange_failed)
    app.add_exception_handler(DriveListingError, _listing_failed)
    app.add_exception_handler(SessionStoreError, _store_unavailable)


__all__ = ["register_exception_handlers"]
