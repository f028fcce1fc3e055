"""
Domain models for the browser session lifecycle.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuthState(str, Enum):
    """Where an inbound request sits in the login flow."""

    NO_COOKIE = "no_cookie"
    COOKIE_PRESENT_NO_SESSION = "cookie_present_no_session"
    COOKIE_PRESENT_VALID_SESSION = "cookie_present_valid_session"
    CALLBACK_ERROR = "callback_error"
    CALLBACK_MISSING_CODE = "callback_missing_code"
    CALLBACK_MALFORMED_STATE = "callback_malformed_state"
    CALLBACK_VALID = "callback_valid"


class ActiveSession(BaseModel):
    """A session cookie that resolved to a live access token."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., description="Value of the 'auth' cookie.")
    access_token: str = Field(..., repr=False)


__all__ = ["ActiveSession", "AuthState"]
