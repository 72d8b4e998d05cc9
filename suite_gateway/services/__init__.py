"""Service layer exports."""

from .client_factory import TokenRotation, build_client
from .identity_token import MalformedIdentityToken, describe_identity_token
from .session_lifecycle import (
    SessionLifecycleController,
    SessionOutcome,
    SessionState,
    to_session_view,
)
from .session_store import InvalidSessionToken, SessionTokenStore
from .token_refresh import RefreshFailure, TokenRefreshEngine

__all__ = [
    "InvalidSessionToken",
    "MalformedIdentityToken",
    "RefreshFailure",
    "SessionLifecycleController",
    "SessionOutcome",
    "SessionState",
    "SessionTokenStore",
    "TokenRefreshEngine",
    "TokenRotation",
    "build_client",
    "describe_identity_token",
    "to_session_view",
]
