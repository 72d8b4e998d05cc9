"""Read claims out of federated identity tokens.

Identity tokens are held verbatim in the session and only inspected for
display and for the subject claim at sign-in. Signatures are not verified
here; the token arrived directly from the Google token endpoint over TLS.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google.auth import exceptions as google_auth_exceptions
from google.auth import jwt as google_jwt

from suite_gateway.schemas.session import IdentityTokenDetails


class MalformedIdentityToken(Exception):
    """Raised when an identity token cannot be decoded."""


def decode_claims(id_token: str) -> Dict[str, Any]:
    """Return the unverified claim set of ``id_token``."""
    try:
        claims = google_jwt.decode(id_token, verify=False)
    except (ValueError, google_auth_exceptions.GoogleAuthError) as exc:
        raise MalformedIdentityToken("Identity token could not be decoded.") from exc
    if not isinstance(claims, dict):
        raise MalformedIdentityToken("Identity token payload is not an object.")
    return claims


def _timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None


def describe_identity_token(id_token: str) -> IdentityTokenDetails:
    claims = decode_claims(id_token)
    return IdentityTokenDetails(
        issuer=claims.get("iss"),
        audience=claims.get("aud"),
        subject=claims.get("sub"),
        tenant_id=claims.get("tid"),
        object_id=claims.get("oid"),
        email=claims.get("email") or claims.get("preferred_username"),
        issued_at=_timestamp(claims.get("iat")),
        expires_at=_timestamp(claims.get("exp")),
        claims=claims,
    )


def profile_from_claims(claims: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """Map OpenID Connect claims onto the session profile fields."""
    return {
        "subject_id": claims.get("sub"),
        "name": claims.get("name"),
        "email": claims.get("email"),
        "picture": claims.get("picture"),
    }


__all__ = [
    "MalformedIdentityToken",
    "decode_claims",
    "describe_identity_token",
    "profile_from_claims",
]
