"""Public schema exports."""

from .auth import TokenResponse
from .drive import DriveFile, DriveFileList, DriveOwner

__all__ = [
    "DriveFile",
    "DriveFileList",
    "DriveOwner",
    "TokenResponse",
]
