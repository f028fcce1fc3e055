"""Google Drive client wrapper."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.schemas.drive import DriveFileList

_LIST_FIELDS = "items(title,iconLink,alternateLink,owners(displayName))"


class DriveListingError(Exception):
    """Raised when Drive answers a listing request with an error."""


def _default_service(credentials: Credentials) -> Any:
    return build("drive", "v2", credentials=credentials, cache_discovery=False)


def title_contains(value: str) -> str:
    """Drive v2 search clause matching titles that contain ``value``."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"title contains '{escaped}'"


class GoogleDriveClient:
    """List the signed-in user's Drive files with their bearer token."""

    def __init__(self, service_factory: Callable[[Credentials], Any] = _default_service) -> None:
        self._service_factory = service_factory

    async def list_files(self, access_token: str, query: Optional[str] = None) -> DriveFileList:
        """Return the user's files, filtered by title when ``query`` is given."""
        credentials = Credentials(token=access_token)

        def _execute_list() -> dict:
            params: dict[str, Any] = {"fields": _LIST_FIELDS}
            if query:
                params["q"] = title_contains(query)
            try:
                service = self._service_factory(credentials)
                return service.files().list(**params).execute()
            except HttpError as exc:
                raise DriveListingError(_error_detail(exc)) from exc
            except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
                raise DriveListingError(f"Drive request failed: {exc}") from exc

        response = await asyncio.to_thread(_execute_list)
        if response.get("error"):
            raise DriveListingError(json.dumps(response["error"]))
        return DriveFileList.model_validate(response)


def _error_detail(exc: HttpError) -> str:
    content = exc.content.decode("utf-8", errors="replace") if exc.content else ""
    try:
        return json.dumps(json.loads(content)["error"])
    except (ValueError, KeyError, TypeError):
        return content or str(exc)


__all__ = ["DriveListingError", "GoogleDriveClient", "title_contains"]
