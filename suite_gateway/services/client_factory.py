"""
Build authenticated Google API clients from already-validated session tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from google.oauth2.credentials import Credentials

from suite_gateway.clients.google_auth import GoogleOAuthClient
from suite_gateway.core.config import GoogleSettings, OAuthSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenRotation:
    """Tokens the Google client library obtained on its own."""

    access_token: Optional[str]
    refresh_token: Optional[str]
    expiry: Optional[datetime]


TokenObserver = Callable[[TokenRotation], None]


class ObservedCredentials(Credentials):
    """OAuth2 credentials that report library-driven refreshes to an observer."""

    def __init__(
        self, *args: Any, on_tokens: Optional[TokenObserver] = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self._on_tokens = on_tokens

    def refresh(self, request: Any) -> None:
        previous_refresh_token = self.refresh_token
        super().refresh(request)
        rotation = TokenRotation(
            access_token=self.token,
            refresh_token=(
                self.refresh_token if self.refresh_token != previous_refresh_token else None
            ),
            expiry=self.expiry,
        )
        logger.info(
            "New tokens received from client library "
            "(access token: %s, refresh token: %s, expiry: %s)",
            rotation.access_token is not None,
            rotation.refresh_token is not None,
            rotation.expiry.isoformat() if rotation.expiry else None,
        )
        if self._on_tokens is not None:
            self._on_tokens(rotation)


def build_client(
    access_token: str,
    refresh_token: Optional[str] = None,
    *,
    google_settings: GoogleSettings,
    oauth_settings: OAuthSettings,
    on_tokens: Optional[TokenObserver] = None,
) -> ObservedCredentials:
    """Bind session tokens to a credentials object scoped to one caller.

    No refresh happens here. If the Google client library later refreshes on
    its own, ``on_tokens`` sees the new values; they are not written back to
    the session.
    """
    if not access_token:
        raise ValueError("An access token is required to build a client.")
    return ObservedCredentials(
        token=access_token,
        refresh_token=refresh_token,
        token_uri=GoogleOAuthClient.TOKEN_URL,
        client_id=google_settings.client_id,
        client_secret=google_settings.client_secret,
        scopes=list(oauth_settings.scopes),
        on_tokens=on_tokens,
    )


__all__ = [
    "ObservedCredentials",
    "TokenObserver",
    "TokenRotation",
    "build_client",
]
