"""Subset of the Drive v2 ``files`` resource rendered by the file list."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DriveOwner(BaseModel):
    model_config = ConfigDict(extra="ignore")

    displayName: str = ""


class DriveFile(BaseModel):
    """A single entry of ``files.list``."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    iconLink: str = ""
    alternateLink: str = ""
    owners: List[DriveOwner] = Field(default_factory=list)


class DriveFileList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: List[DriveFile] = Field(default_factory=list)


__all__ = ["DriveFile", "DriveFileList", "DriveOwner"]
