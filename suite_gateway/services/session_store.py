"""Sealed, client-held session tokens carrying the credential record."""

from __future__ import annotations

import base64
import hashlib
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from suite_gateway.models.credentials import CredentialRecord


class InvalidSessionToken(Exception):
    """Raised when a session token is tampered with, expired or unreadable."""


class SessionTokenStore:
    """Encode credential records into opaque session tokens and back.

    Tokens are Fernet tokens (AES-CBC + HMAC-SHA256) keyed from the session
    secret, so they are both confidential and tamper-evident. The Fernet
    timestamp doubles as the session issue time: a token older than
    ``max_age_seconds`` no longer decodes.
    """

    def __init__(self, *, secret: str, max_age_seconds: int) -> None:
        if not secret:
            raise ValueError("Session secret must be provided.")
        if max_age_seconds <= 0:
            raise ValueError("Session max age must be positive.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        key = base64.urlsafe_b64encode(digest)
        self._fernet = Fernet(key)
        self._max_age = max_age_seconds

    @property
    def max_age_seconds(self) -> int:
        return self._max_age

    def encode(self, record: CredentialRecord) -> str:
        """Seal a credential record into a session token."""
        payload = record.model_dump_json(exclude_none=True)
        return self._fernet.encrypt(payload.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> CredentialRecord:
        """Open a session token and return the credential record it carries."""
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"), ttl=self._max_age)
        except InvalidToken as exc:
            raise InvalidSessionToken(
                "Session token is invalid or has expired."
            ) from exc
        try:
            return CredentialRecord.model_validate_json(plaintext)
        except ValidationError as exc:
            raise InvalidSessionToken("Session token payload is malformed.") from exc

    def expires_at(self, token: str) -> datetime:
        """Absolute instant after which ``token`` stops decoding."""
        try:
            issued = self._fernet.extract_timestamp(token.encode("utf-8"))
        except InvalidToken as exc:
            raise InvalidSessionToken("Session token is invalid.") from exc
        return datetime.fromtimestamp(issued, tz=timezone.utc) + timedelta(
            seconds=self._max_age
        )


__all__ = ["InvalidSessionToken", "SessionTokenStore"]
