"""Schemas exposed to session consumers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionUser(BaseModel):
    """Identity of the signed-in user."""

    id: str = Field(..., description="Stable subject identifier.")
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class SessionView(BaseModel):
    """Materialized session handed to route handlers.

    Consumers must check ``error`` before trusting ``access_token``.
    """

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    id_token: Optional[str] = Field(None, alias="idToken")
    error: Optional[str] = Field(
        None, description="RefreshAccessTokenError once the session can no longer refresh."
    )
    access_token_expires_at: datetime = Field(..., alias="accessTokenExpiresAt")
    expires: datetime = Field(..., description="When the session token itself lapses.")
    user: SessionUser


class IdentityTokenDetails(BaseModel):
    """Unverified identity token claims for display."""

    issuer: Optional[str] = None
    audience: Optional[Any] = None
    subject: Optional[str] = None
    tenant_id: Optional[str] = Field(None, alias="tenantId")
    object_id: Optional[str] = Field(None, alias="objectId")
    email: Optional[str] = None
    issued_at: Optional[datetime] = Field(None, alias="issuedAt")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    claims: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["IdentityTokenDetails", "SessionUser", "SessionView"]
