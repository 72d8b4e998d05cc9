"""Public schema exports."""

from .google import (
    CalendarEventRequest,
    DriveFileDeleteRequest,
    DriveFolderRequest,
    DriveUploadRequest,
)
from .session import IdentityTokenDetails, SessionUser, SessionView

__all__ = [
    "CalendarEventRequest",
    "DriveFileDeleteRequest",
    "DriveFolderRequest",
    "DriveUploadRequest",
    "IdentityTokenDetails",
    "SessionUser",
    "SessionView",
]
