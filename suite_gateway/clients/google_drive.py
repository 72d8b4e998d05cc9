"""Google Drive client wrapper."""

from __future__ import annotations

import asyncio
import io
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

_FILE_FIELDS = (
    "nextPageToken, files(id, name, mimeType, createdTime, modifiedTime, size, webViewLink)"
)


class GoogleDriveClient:
    """List, create and delete files in the user's Drive."""

    async def list_recent_files(
        self, credentials: Credentials, *, page_size: int = 20
    ) -> List[Dict[str, Any]]:
        """Return the most recently modified files, newest first."""

        def _execute_list() -> List[Dict[str, Any]]:
            service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            response = (
                service.files()
                .list(pageSize=page_size, fields=_FILE_FIELDS, orderBy="modifiedTime desc")
                .execute()
            )
            return response.get("files", [])

        return await asyncio.to_thread(_execute_list)

    async def create_folder(
        self, credentials: Credentials, *, name: str, parent_id: Optional[str] = None
    ) -> Dict[str, Any]:
        def _execute_create() -> Dict[str, Any]:
            service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            metadata: Dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
            if parent_id:
                metadata["parents"] = [parent_id]
            return (
                service.files()
                .create(body=metadata, fields="id, name, webViewLink, createdTime")
                .execute()
            )

        return await asyncio.to_thread(_execute_create)

    async def upload_file(
        self,
        credentials: Credentials,
        *,
        file_name: str,
        mime_type: str,
        content: bytes,
        parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload ``content`` as a new file and return its metadata."""

        def _execute_upload() -> Dict[str, Any]:
            service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            metadata: Dict[str, Any] = {"name": file_name}
            if parent_id:
                metadata["parents"] = [parent_id]
            media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
            return (
                service.files()
                .create(
                    body=metadata,
                    media_body=media,
                    fields="id, name, mimeType, size, webViewLink, createdTime",
                )
                .execute()
            )

        return await asyncio.to_thread(_execute_upload)

    async def delete_file(self, credentials: Credentials, file_id: str) -> None:
        def _execute_delete() -> None:
            service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            service.files().delete(fileId=file_id).execute()

        await asyncio.to_thread(_execute_delete)


__all__ = ["FOLDER_MIME_TYPE", "GoogleDriveClient"]
