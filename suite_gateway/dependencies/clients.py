"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Everything cached here is read-only after construction; per-user credential
state never lives in these objects.
"""

from datetime import timedelta
from functools import lru_cache

from suite_gateway.clients import (
    GmailClient,
    GoogleCalendarClient,
    GoogleDriveClient,
    GoogleOAuthClient,
    OAuthStateEncoder,
)
from suite_gateway.core.config import get_settings
from suite_gateway.services import (
    SessionLifecycleController,
    SessionTokenStore,
    TokenRefreshEngine,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_oauth_state_encoder() -> OAuthStateEncoder:
    """Provide an OAuth state encoder keyed by the session secret."""
    settings = _settings()
    return OAuthStateEncoder(secret_key=settings.session.secret)


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    settings = _settings()
    return GoogleOAuthClient(settings.google, settings.oauth)


@lru_cache()
def get_session_store() -> SessionTokenStore:
    """Provide the sealer for client-held session tokens."""
    settings = _settings()
    return SessionTokenStore(
        secret=settings.session.secret,
        max_age_seconds=settings.session.max_age_seconds,
    )


@lru_cache()
def get_token_refresh_engine() -> TokenRefreshEngine:
    """Provide the refresh-token exchange."""
    return TokenRefreshEngine(get_google_oauth_client())


@lru_cache()
def get_session_controller() -> SessionLifecycleController:
    """Provide the per-request session lifecycle controller."""
    settings = _settings()
    return SessionLifecycleController(
        get_token_refresh_engine(),
        refresh_buffer=timedelta(seconds=settings.session.refresh_buffer_seconds),
    )


@lru_cache()
def get_gmail_client() -> GmailClient:
    return GmailClient()


@lru_cache()
def get_calendar_client() -> GoogleCalendarClient:
    return GoogleCalendarClient()


@lru_cache()
def get_drive_client() -> GoogleDriveClient:
    return GoogleDriveClient()


__all__ = [
    "get_calendar_client",
    "get_drive_client",
    "get_gmail_client",
    "get_google_oauth_client",
    "get_oauth_state_encoder",
    "get_session_controller",
    "get_session_store",
    "get_token_refresh_engine",
]
