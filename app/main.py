"""
FastAPI application entrypoint for the Drive viewer gateway.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI

from app import dependencies
from app.api.errors import register_exception_handlers
from app.api.routes import router
from app.core.config import AppSettings, get_settings
from app.core.logging import configure_logging
from app.utils.tasks import BackgroundTaskTracker


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    session_store: Any = None,
    oauth_client: Any = None,
    drive_client: Any = None,
    credential_issuer: Any = None,
    clock: Optional[Callable[[], int]] = None,
) -> FastAPI:
    """Factory for the FastAPI application.

    Collaborators passed in replace the default dependency factories, which
    lets callers run the router against fakes.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)
    tracker = BackgroundTaskTracker()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await tracker.drain(timeout=settings.session.background_drain_seconds)

    app = FastAPI(
        title="Drive Viewer Gateway",
        version="0.1.0",
        description="Google Drive file listing behind a Google OAuth login.",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.task_tracker = tracker
    app.include_router(router)
    register_exception_handlers(app)

    overrides = {
        dependencies.get_app_settings: settings,
        dependencies.get_session_store: session_store,
        dependencies.get_google_oauth_client: oauth_client,
        dependencies.get_drive_client: drive_client,
        dependencies.get_credential_issuer: credential_issuer,
        dependencies.get_clock: clock,
    }
    for factory, value in overrides.items():
        if value is not None:
            app.dependency_overrides[factory] = _provide(value)
    return app


def _provide(value: Any) -> Callable[[], Any]:
    def provider() -> Any:
        return value

    return provider


app = create_app()

__all__ = ["app", "create_app"]
