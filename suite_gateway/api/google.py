"""
Gmail, Calendar and Drive endpoints.

Each handler checks the materialized session before building a Google client:
no session and sessions flagged with a refresh error are answered with 401
without calling Google.
"""

from __future__ import annotations

import base64
import binascii
import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from google.oauth2.credentials import Credentials

from suite_gateway.clients import GmailClient, GoogleCalendarClient, GoogleDriveClient
from suite_gateway.core.config import AppSettings
from suite_gateway.dependencies import (
    CurrentSession,
    get_app_settings,
    get_calendar_client,
    get_drive_client,
    get_gmail_client,
)
from suite_gateway.models.credentials import REFRESH_ERROR_CODE
from suite_gateway.schemas.google import (
    CalendarEventRequest,
    DriveFileDeleteRequest,
    DriveFolderRequest,
    DriveUploadRequest,
)
from suite_gateway.schemas.session import SessionView
from suite_gateway.services import build_client

router = APIRouter(prefix="/google")
logger = logging.getLogger(__name__)


def _credentials_for(
    session: Optional[SessionView], response: Response, settings: AppSettings
) -> Credentials | dict:
    """Credentials for a usable session, or the 401 body to return instead."""
    if session is None or not session.access_token:
        response.status_code = HTTPStatus.UNAUTHORIZED
        return {"error": "Unauthorized - No valid session"}
    if session.error == REFRESH_ERROR_CODE:
        response.status_code = HTTPStatus.UNAUTHORIZED
        return {"error": "Session expired. Please sign in again."}
    return build_client(
        session.access_token,
        session.refresh_token,
        google_settings=settings.google,
        oauth_settings=settings.oauth,
    )


def _failure(response: Response, message: str, exc: Exception) -> dict:
    logger.error("%s: %s", message, exc)
    response.status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    return {"error": message, "details": str(exc)}


def _bad_request(response: Response, message: str) -> dict:
    response.status_code = HTTPStatus.BAD_REQUEST
    return {"error": message}


@router.get("/gmail/list")
async def list_gmail_messages(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    gmail: Annotated[GmailClient, Depends(get_gmail_client)],
) -> dict:
    """List the latest 10 messages from the inbox."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    try:
        messages = await gmail.list_inbox(credentials)
    except Exception as exc:
        return _failure(response, "Failed to list Gmail messages", exc)
    return {"success": True, "messages": messages, "count": len(messages)}


@router.get("/gmail/message")
async def read_gmail_message(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    gmail: Annotated[GmailClient, Depends(get_gmail_client)],
    message_id: Optional[str] = Query(default=None, alias="id"),
) -> dict:
    """Read one message, including its plain-text body."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    if not message_id:
        return _bad_request(response, "Message ID is required")
    try:
        message = await gmail.get_message(credentials, message_id)
    except Exception as exc:
        return _failure(response, "Failed to read Gmail message", exc)
    return {"success": True, "message": message}


@router.get("/calendar/list")
async def list_calendar_events(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    calendar: Annotated[GoogleCalendarClient, Depends(get_calendar_client)],
) -> dict:
    """List the next 10 events on the primary calendar."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    try:
        events = await calendar.list_upcoming_events(credentials)
    except Exception as exc:
        return _failure(response, "Failed to list calendar events", exc)
    return {"success": True, "events": events, "count": len(events)}


@router.get("/drive/list")
async def list_drive_files(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    drive: Annotated[GoogleDriveClient, Depends(get_drive_client)],
) -> dict:
    """List the 20 most recently modified Drive files."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    try:
        files = await drive.list_recent_files(credentials)
    except Exception as exc:
        return _failure(response, "Failed to list Drive files", exc)
    return {"success": True, "files": files, "count": len(files)}


@router.post("/calendar/create")
async def create_calendar_event(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    calendar: Annotated[GoogleCalendarClient, Depends(get_calendar_client)],
    payload: Annotated[Optional[CalendarEventRequest], Body()] = None,
) -> dict:
    """Create an event on the primary calendar."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    payload = payload or CalendarEventRequest()
    if not payload.summary or not payload.start_date_time or not payload.end_date_time:
        return _bad_request(response, "summary, startDateTime, and endDateTime are required")
    try:
        event = await calendar.create_event(
            credentials,
            summary=payload.summary,
            start=payload.start_date_time,
            end=payload.end_date_time,
            time_zone=payload.time_zone,
            description=payload.description,
            location=payload.location,
        )
    except Exception as exc:
        return _failure(response, "Failed to create calendar event", exc)
    return {
        "success": True,
        "event": event,
        "message": f'Event "{payload.summary}" created successfully',
    }


@router.post("/drive/folder")
async def create_drive_folder(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    drive: Annotated[GoogleDriveClient, Depends(get_drive_client)],
    payload: Annotated[Optional[DriveFolderRequest], Body()] = None,
) -> dict:
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    payload = payload or DriveFolderRequest()
    if not payload.name:
        return _bad_request(response, "Folder name is required")
    try:
        folder = await drive.create_folder(
            credentials, name=payload.name, parent_id=payload.parent_id
        )
    except Exception as exc:
        return _failure(response, "Failed to create Drive folder", exc)
    return {
        "success": True,
        "folder": folder,
        "message": f'Folder "{payload.name}" created successfully',
    }


@router.post("/drive/upload")
async def upload_drive_file(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    drive: Annotated[GoogleDriveClient, Depends(get_drive_client)],
    payload: Annotated[Optional[DriveUploadRequest], Body()] = None,
) -> dict:
    """Upload a base64-encoded file, optionally into a parent folder."""
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    payload = payload or DriveUploadRequest()
    if not payload.file_name or not payload.mime_type or not payload.base64_data:
        return _bad_request(response, "fileName, mimeType, and base64Data are required")
    try:
        content = base64.b64decode(payload.base64_data, validate=True)
    except (binascii.Error, ValueError):
        return _bad_request(response, "base64Data is not valid base64")
    try:
        uploaded = await drive.upload_file(
            credentials,
            file_name=payload.file_name,
            mime_type=payload.mime_type,
            content=content,
            parent_id=payload.parent_id,
        )
    except Exception as exc:
        return _failure(response, "Failed to upload file to Drive", exc)
    return {
        "success": True,
        "file": uploaded,
        "message": f'File "{payload.file_name}" uploaded successfully',
    }


@router.delete("/drive/file")
async def delete_drive_file(
    session: CurrentSession,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    drive: Annotated[GoogleDriveClient, Depends(get_drive_client)],
    payload: Annotated[Optional[DriveFileDeleteRequest], Body()] = None,
) -> dict:
    credentials = _credentials_for(session, response, settings)
    if isinstance(credentials, dict):
        return credentials
    payload = payload or DriveFileDeleteRequest()
    if not payload.file_id:
        return _bad_request(response, "fileId is required")
    try:
        await drive.delete_file(credentials, payload.file_id)
    except Exception as exc:
        return _failure(response, "Failed to delete Drive file", exc)
    return {"success": True, "message": "File deleted successfully", "fileId": payload.file_id}


__all__ = ["router"]
