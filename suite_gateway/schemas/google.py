"""Request bodies for the Google write endpoints.

Fields are optional at the schema level so missing values are answered with
the endpoint's own 400 message after the session check.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EVENT_TIME_ZONE = "America/Los_Angeles"


class CalendarEventRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date_time: Optional[str] = Field(None, alias="startDateTime")
    end_date_time: Optional[str] = Field(None, alias="endDateTime")
    time_zone: str = Field(DEFAULT_EVENT_TIME_ZONE, alias="timeZone")


class DriveFolderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    parent_id: Optional[str] = Field(None, alias="parentId")


class DriveUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: Optional[str] = Field(None, alias="fileName")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    base64_data: Optional[str] = Field(
        None, alias="base64Data", description="File content, standard base64."
    )
    parent_id: Optional[str] = Field(None, alias="parentId")


class DriveFileDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: Optional[str] = Field(None, alias="fileId")


__all__ = [
    "CalendarEventRequest",
    "DEFAULT_EVENT_TIME_ZONE",
    "DriveFileDeleteRequest",
    "DriveFolderRequest",
    "DriveUploadRequest",
]
