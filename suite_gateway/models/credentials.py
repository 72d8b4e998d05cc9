"""
Domain models for the credential record carried by the session token.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

REFRESH_ERROR_CODE = "RefreshAccessTokenError"


class CredentialStatus(str, Enum):
    """Health of the access token held by a session."""

    VALID = "valid"
    REFRESH_ERROR = "refresh_error"


class CredentialRecord(BaseModel):
    """Tokens and identity for one signed-in session.

    Records are never edited in place; the session lifecycle produces a new
    record with ``model_copy(update=...)`` whenever a field changes.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(..., description="Stable user identifier (OIDC subject).")
    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = Field(
        None, description="Identity assertion captured at sign-in, never refreshed."
    )
    access_token_expires_at: int = Field(
        ..., description="Absolute access token expiry in milliseconds since epoch."
    )
    status: CredentialStatus = CredentialStatus.VALID
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None

    @property
    def error(self) -> Optional[str]:
        if self.status is CredentialStatus.REFRESH_ERROR:
            return REFRESH_ERROR_CODE
        return None


class TokenGrant(BaseModel):
    """Token endpoint response for the authorization-code grant."""

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_at: Optional[int] = Field(
        None, description="Absolute expiry in seconds since epoch, when known."
    )


class SignInGrant(TokenGrant):
    """A fresh provider grant plus the profile resolved for it."""

    subject_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    picture: Optional[str] = None


class RefreshedTokens(BaseModel):
    """Result of a refresh-token grant.

    ``refresh_token`` is only set when the provider rotated it.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    access_token_expires_at: int
    refresh_token: Optional[str] = None


__all__ = [
    "CredentialRecord",
    "CredentialStatus",
    "REFRESH_ERROR_CODE",
    "RefreshedTokens",
    "SignInGrant",
    "TokenGrant",
]
