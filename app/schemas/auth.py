"""Schemas related to the Google OAuth exchange."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Successful answer of the Google token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1, description="Bearer token for Google APIs.")
    expires_in: int = Field(..., gt=0, description="Remaining lifetime of the token in seconds.")


__all__ = ["TokenResponse"]
