"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_calendar_client,
    get_drive_client,
    get_gmail_client,
    get_google_oauth_client,
    get_oauth_state_encoder,
    get_session_controller,
    get_session_store,
    get_token_refresh_engine,
)
from .config import SettingsDependency, get_app_settings
from .session import (
    CurrentSession,
    clear_session_cookie,
    clear_state_cookie,
    get_current_session,
    read_session_record,
    set_session_cookie,
    set_state_cookie,
)

__all__ = [
    "CurrentSession",
    "SettingsDependency",
    "clear_session_cookie",
    "clear_state_cookie",
    "get_app_settings",
    "get_calendar_client",
    "get_current_session",
    "get_drive_client",
    "get_gmail_client",
    "get_google_oauth_client",
    "get_oauth_state_encoder",
    "get_session_controller",
    "get_session_store",
    "get_token_refresh_engine",
    "read_session_record",
    "set_session_cookie",
    "set_state_cookie",
]
