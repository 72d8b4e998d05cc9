"""
Google OAuth utilities.

These helpers build the consent URL, sign the OAuth state round-trip and talk
to the Google token and userinfo endpoints.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
from hashlib import sha256
from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from suite_gateway.core.clock import now_ms, resolve_expiry_ms
from suite_gateway.core.config import GoogleSettings, OAuthSettings
from suite_gateway.models.credentials import TokenGrant


class InvalidOAuthState(Exception):
    """Raised when an OAuth state value fails signature or shape checks."""


class OAuthStateEncoder:
    """Encode and decode OAuth state values to guard against tampering."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key.encode("utf-8")

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        signature = hmac.new(self._secret_key, serialized.encode("utf-8"), sha256).digest()
        return base64.urlsafe_b64encode(signature + serialized.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            decoded = base64.urlsafe_b64decode(token.encode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            raise InvalidOAuthState("OAuth state is not valid base64.") from exc
        signature, serialized = decoded[:32], decoded[32:]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise InvalidOAuthState("Invalid OAuth state signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidOAuthState("OAuth state payload is not JSON.") from exc
        if not isinstance(payload, dict):
            raise InvalidOAuthState("OAuth state payload must be an object.")
        return payload


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error or an unusable payload."""


class GoogleOAuthClient:
    """Build Google authorization URLs and call the token endpoint."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

    def __init__(
        self,
        google_settings: GoogleSettings,
        oauth_settings: OAuthSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._google = google_settings
        self._oauth = oauth_settings
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._oauth.http_timeout_seconds, transport=self._transport
        )

    def build_authorization_url(self, state: str, access_type: str = "offline") -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": str(self._google.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._oauth.scopes),
            "access_type": access_type,
            "include_granted_scopes": "true",
            "prompt": "consent",
            "state": state,
        }
        query = urlencode(params)
        return f"{self.AUTH_BASE_URL}?{query}"

    async def _post_token_endpoint(self, payload: Dict[str, str]) -> Dict[str, Any]:
        async with self._http() as client:
            response = await client.post(self.TOKEN_URL, data=payload)

        if response.status_code != httpx.codes.OK:
            raise OAuthTokenExchangeError(
                f"Token endpoint returned {response.status_code}: {response.text}"
            )
        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned non-JSON body.") from exc
        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError("Token endpoint returned an unexpected body.")
        return token_payload

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for access, refresh and identity tokens."""
        token_payload = await self._post_token_endpoint(
            {
                "code": code,
                "client_id": self._google.client_id,
                "client_secret": self._google.client_secret,
                "redirect_uri": str(self._google.redirect_uri),
                "grant_type": "authorization_code",
            }
        )

        access_token = token_payload.get("access_token")
        if not access_token:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")

        expires_at = None
        raw_expires_at = token_payload.get("expires_at")
        raw_expires_in = token_payload.get("expires_in")
        if raw_expires_at is not None or raw_expires_in is not None:
            try:
                expires_at = (
                    resolve_expiry_ms(
                        expires_at=raw_expires_at, expires_in=raw_expires_in, now=now_ms()
                    )
                    // 1000
                )
            except (TypeError, ValueError, OverflowError) as exc:
                raise OAuthTokenExchangeError(f"Unusable token expiry: {exc}") from exc

        return TokenGrant(
            access_token=access_token,
            refresh_token=token_payload.get("refresh_token"),
            id_token=token_payload.get("id_token"),
            expires_at=expires_at,
        )

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """Run the refresh-token grant and return the raw token payload."""
        return await self._post_token_endpoint(
            {
                "client_id": self._google.client_id,
                "client_secret": self._google.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )

    async def fetch_user_profile(self, access_token: str) -> Dict[str, Any]:
        """Fetch OpenID Connect userinfo for the given access token."""
        async with self._http() as client:
            response = await client.get(
                self.USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        if response.status_code != httpx.codes.OK:
            raise OAuthTokenExchangeError(
                f"Userinfo endpoint returned {response.status_code}."
            )
        try:
            profile = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Userinfo endpoint returned non-JSON body.") from exc
        if not isinstance(profile, dict):
            raise OAuthTokenExchangeError("Userinfo endpoint returned an unexpected body.")
        return profile


__all__ = [
    "GoogleOAuthClient",
    "InvalidOAuthState",
    "OAuthStateEncoder",
    "OAuthTokenExchangeError",
]
