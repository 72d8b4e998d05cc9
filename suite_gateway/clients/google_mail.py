"""Gmail client wrapper (read-only)."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Dict, Iterable, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)


def _header(headers: Iterable[Dict[str, str]], name: str, default: str = "") -> str:
    for header in headers:
        if header.get("name") == name:
            return header.get("value", default)
    return default


def _decode_body(data: str) -> str:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("utf-8")).decode("utf-8", errors="replace")


def extract_plain_text(payload: Dict[str, Any]) -> str:
    """Concatenate the text/plain parts of a Gmail message payload."""
    body_data = (payload.get("body") or {}).get("data")
    if body_data:
        return _decode_body(body_data)

    text = ""
    for part in payload.get("parts") or []:
        part_data = (part.get("body") or {}).get("data")
        if part.get("mimeType") == "text/plain" and part_data:
            text += _decode_body(part_data)
        elif part.get("parts"):
            text += extract_plain_text({"parts": part["parts"]})
    return text


class GmailClient:
    """List and read messages in the signed-in user's mailbox."""

    async def list_inbox(
        self, credentials: Credentials, *, max_results: int = 10
    ) -> List[Dict[str, Any]]:
        """Return header metadata for the newest inbox messages."""

        def _execute_list() -> List[Dict[str, Any]]:
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
            response = (
                service.users()
                .messages()
                .list(userId="me", maxResults=max_results, labelIds=["INBOX"])
                .execute()
            )
            summaries: List[Dict[str, Any]] = []
            for message in response.get("messages", []):
                summary = self._fetch_summary(service, message["id"])
                if summary is not None:
                    summaries.append(summary)
            return summaries

        return await asyncio.to_thread(_execute_list)

    @staticmethod
    def _fetch_summary(service: Any, message_id: str) -> Optional[Dict[str, Any]]:
        try:
            details = (
                service.users()
                .messages()
                .get(
                    userId="me",
                    id=message_id,
                    format="metadata",
                    metadataHeaders=["From", "Subject", "Date"],
                )
                .execute()
            )
        except HttpError as exc:
            logger.warning("Error fetching message %s: %s", message_id, exc)
            return None

        headers = (details.get("payload") or {}).get("headers", [])
        return {
            "id": details.get("id"),
            "threadId": details.get("threadId"),
            "snippet": details.get("snippet"),
            "from": _header(headers, "From"),
            "subject": _header(headers, "Subject", "(No Subject)"),
            "date": _header(headers, "Date"),
            "labelIds": details.get("labelIds"),
        }

    async def get_message(self, credentials: Credentials, message_id: str) -> Dict[str, Any]:
        """Return one message with its plain-text body."""

        def _execute_get() -> Dict[str, Any]:
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
            message = (
                service.users()
                .messages()
                .get(userId="me", id=message_id, format="full")
                .execute()
            )
            payload = message.get("payload") or {}
            headers = payload.get("headers", [])
            return {
                "id": message.get("id"),
                "threadId": message.get("threadId"),
                "from": _header(headers, "From"),
                "to": _header(headers, "To"),
                "subject": _header(headers, "Subject", "(No Subject)"),
                "date": _header(headers, "Date"),
                "snippet": message.get("snippet"),
                "body": extract_plain_text(payload),
                "labelIds": message.get("labelIds"),
            }

        return await asyncio.to_thread(_execute_get)


__all__ = ["GmailClient", "extract_plain_text"]
