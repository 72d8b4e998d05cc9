"""Google Calendar client wrapper."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build


class GoogleCalendarClient:
    """Read and create events on the user's primary calendar."""

    async def list_upcoming_events(
        self, credentials: Credentials, *, max_results: int = 10
    ) -> List[Dict[str, Any]]:
        time_min = datetime.now(timezone.utc).isoformat()

        def _execute_list() -> List[Dict[str, Any]]:
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
            response = (
                service.events()
                .list(
                    calendarId="primary",
                    timeMin=time_min,
                    maxResults=max_results,
                    singleEvents=True,
                    orderBy="startTime",
                )
                .execute()
            )
            events = []
            for event in response.get("items", []):
                start = event.get("start") or {}
                end = event.get("end") or {}
                events.append(
                    {
                        "id": event.get("id"),
                        "summary": event.get("summary"),
                        "description": event.get("description"),
                        "start": start.get("dateTime") or start.get("date"),
                        "end": end.get("dateTime") or end.get("date"),
                        "location": event.get("location"),
                        "htmlLink": event.get("htmlLink"),
                        "status": event.get("status"),
                    }
                )
            return events

        return await asyncio.to_thread(_execute_list)

    async def create_event(
        self,
        credentials: Credentials,
        *,
        summary: str,
        start: str,
        end: str,
        time_zone: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Insert an event and return the fields callers display."""
        body = {
            "summary": summary,
            "description": description or "",
            "location": location or "",
            "start": {"dateTime": start, "timeZone": time_zone},
            "end": {"dateTime": end, "timeZone": time_zone},
        }

        def _execute_insert() -> Dict[str, Any]:
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
            created = service.events().insert(calendarId="primary", body=body).execute()
            return {
                "id": created.get("id"),
                "summary": created.get("summary"),
                "start": (created.get("start") or {}).get("dateTime"),
                "end": (created.get("end") or {}).get("dateTime"),
                "htmlLink": created.get("htmlLink"),
            }

        return await asyncio.to_thread(_execute_insert)


__all__ = ["GoogleCalendarClient"]
