"""
Exchange refresh tokens for new Google access tokens.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, TYPE_CHECKING

import httpx

from suite_gateway.clients.google_auth import OAuthTokenExchangeError
from suite_gateway.core.clock import now_ms, resolve_expiry_ms
from suite_gateway.models.credentials import RefreshedTokens

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from suite_gateway.clients.google_auth import GoogleOAuthClient

logger = logging.getLogger(__name__)


class RefreshFailure(Exception):
    """Raised when a refresh-token grant cannot produce a new access token."""


class TokenRefreshEngine:
    """Stateless refresh-token exchange.

    A single attempt is made per call. Network errors, timeouts, provider
    rejections and malformed payloads all surface as ``RefreshFailure``; the
    caller decides what a failure means for the session.
    """

    def __init__(
        self,
        oauth_client: "GoogleOAuthClient",
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._oauth = oauth_client
        self._clock = clock

    async def refresh(self, refresh_token: str) -> RefreshedTokens:
        """Mint a new access token from ``refresh_token``."""
        if not refresh_token:
            raise ValueError("A refresh token is required.")

        requested_at = self._clock()
        try:
            payload = await self._oauth.refresh_token(refresh_token)
        except httpx.TimeoutException as exc:
            logger.warning("Refresh token exchange timed out: %s", exc)
            raise RefreshFailure("Token endpoint timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning("Refresh token exchange failed on the network: %s", exc)
            raise RefreshFailure("Token endpoint unreachable.") from exc
        except OAuthTokenExchangeError as exc:
            logger.warning("Refresh token rejected by provider: %s", exc)
            raise RefreshFailure("Provider rejected the refresh token.") from exc

        refreshed = self._parse(payload, requested_at)
        logger.info(
            "Access token refreshed (rotated refresh token: %s)",
            refreshed.refresh_token is not None,
        )
        return refreshed

    @staticmethod
    def _parse(payload: Dict[str, Any], requested_at: int) -> RefreshedTokens:
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise RefreshFailure("Refresh payload is missing an access token.")

        try:
            expires_at = resolve_expiry_ms(
                expires_at=payload.get("expires_at"),
                expires_in=payload.get("expires_in"),
                now=requested_at,
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise RefreshFailure(f"Refresh payload carries an unusable expiry: {exc}") from exc

        rotated = payload.get("refresh_token")
        return RefreshedTokens(
            access_token=access_token,
            access_token_expires_at=expires_at,
            refresh_token=rotated if isinstance(rotated, str) and rotated else None,
        )


__all__ = ["RefreshFailure", "TokenRefreshEngine"]
