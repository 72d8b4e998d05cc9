"""
Application configuration models and helpers.

Centralizes settings management so the session layer, the access gate and the
Google collaborators read one consistent, read-only configuration surface.
"""

from functools import lru_cache
from typing import Annotated

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_SETTINGS_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    return tuple(item.strip() for item in value.split(",") if item.strip())


DEFAULT_SCOPES: tuple[str, ...] = (
    "openid",
    "email",
    "profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/admin.directory.group.readonly",
    "https://www.googleapis.com/auth/admin.directory.user.readonly",
    "https://www.googleapis.com/auth/directory.readonly",
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/calendar.events.readonly",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/contacts.readonly",
    "https://www.googleapis.com/auth/contacts.other.readonly",
    "https://www.googleapis.com/auth/cloud-identity.groups.readonly",
)


class GoogleSettings(BaseSettings):
    """Application credentials registered with the Google identity provider."""

    model_config = _SETTINGS_CONFIG

    client_id: str = Field(..., validation_alias="GOOGLE_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GOOGLE_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(
        ...,
        validation_alias="GOOGLE_REDIRECT_URI",
        description="Callback URL registered for the authorization-code grant.",
    )


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = _SETTINGS_CONFIG

    state_ttl_seconds: int = Field(900, validation_alias="OAUTH_STATE_TTL")
    state_cookie_name: str = Field(
        "suite_gateway.oauth-state",
        validation_alias="OAUTH_STATE_COOKIE_NAME",
        description="Cookie binding a pending sign-in to the browser that started it.",
    )
    http_timeout_seconds: float = Field(
        5.0,
        validation_alias="OAUTH_HTTP_TIMEOUT",
        description="Upper bound for a single token endpoint round-trip.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        DEFAULT_SCOPES, validation_alias="OAUTH_SCOPES"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        return _split_csv(value)


class SessionSettings(BaseSettings):
    """Session cookie and access gate configuration."""

    model_config = _SETTINGS_CONFIG

    secret: str = Field(
        ...,
        validation_alias="SESSION_SECRET",
        description="Secret used to derive the key that seals the session token.",
    )
    max_age_seconds: int = Field(30 * 24 * 60 * 60, validation_alias="SESSION_MAX_AGE")
    cookie_name: str = Field(
        "suite_gateway.session-token", validation_alias="SESSION_COOKIE_NAME"
    )
    refresh_buffer_seconds: int = Field(300, validation_alias="SESSION_REFRESH_BUFFER")
    protected_paths: Annotated[tuple[str, ...], NoDecode] = Field(
        ("/dashboard/*",), validation_alias="SESSION_PROTECTED_PATHS"
    )

    @field_validator("protected_paths", mode="before")
    @classmethod
    def _split_paths(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        return _split_csv(value)


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _SETTINGS_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    sign_in_path: str = Field(
        "/",
        validation_alias="SIGN_IN_PATH",
        description="Where unauthenticated visitors of protected paths are sent.",
    )
    post_sign_in_path: str = Field("/dashboard", validation_alias="POST_SIGN_IN_PATH")
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DEFAULT_SCOPES",
    "GoogleSettings",
    "OAuthSettings",
    "SessionSettings",
    "get_settings",
]
