"""
Per-request session lifecycle: seed, validate, refresh or fail the credential.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from suite_gateway.core.clock import (
    DEFAULT_TOKEN_LIFETIME,
    REFRESH_BUFFER,
    is_token_expired,
    ms_to_datetime,
    now_ms,
    to_ms,
)
from suite_gateway.models.credentials import (
    CredentialRecord,
    CredentialStatus,
    SignInGrant,
)
from suite_gateway.schemas.session import SessionUser, SessionView
from suite_gateway.services.token_refresh import RefreshFailure

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from suite_gateway.services.token_refresh import TokenRefreshEngine

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Where a session stands after materialization."""

    FRESH = "fresh"
    VALID = "valid"
    EXPIRING = "expiring"
    REFRESHED = "refreshed"
    ERRORED = "errored"


@dataclass(frozen=True)
class SessionOutcome:
    record: Optional[CredentialRecord]
    state: Optional[SessionState]


class SessionLifecycleController:
    """Decide, on every session read, whether to reuse, refresh or fail a credential.

    The controller is the only writer of credential records. It never raises
    refresh problems to its caller: a failed or impossible refresh is recorded
    as ``CredentialStatus.REFRESH_ERROR`` on the returned record, and that
    status sticks until a new sign-in seeds a fresh record.
    """

    def __init__(
        self,
        refresh_engine: "TokenRefreshEngine",
        *,
        refresh_buffer: timedelta = REFRESH_BUFFER,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._engine = refresh_engine
        self._buffer = refresh_buffer
        self._clock = clock

    def seed(self, grant: SignInGrant) -> CredentialRecord:
        """Build the first record of a session from a fresh provider grant."""
        if grant.expires_at:
            expires_at = grant.expires_at * 1000
        else:
            expires_at = self._clock() + to_ms(DEFAULT_TOKEN_LIFETIME)
        logger.info(
            "Initial sign-in for subject %s (refresh token: %s, id token: %s)",
            grant.subject_id,
            grant.refresh_token is not None,
            grant.id_token is not None,
        )
        return CredentialRecord(
            subject_id=grant.subject_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            id_token=grant.id_token,
            access_token_expires_at=expires_at,
            status=CredentialStatus.VALID,
            name=grant.name,
            email=grant.email,
            picture=grant.picture,
        )

    async def materialize(
        self,
        record: Optional[CredentialRecord],
        *,
        grant: Optional[SignInGrant] = None,
    ) -> SessionOutcome:
        """Return the credential record a request should see."""
        if grant is not None:
            return SessionOutcome(self.seed(grant), SessionState.FRESH)

        if record is None:
            return SessionOutcome(None, None)

        if record.status is CredentialStatus.REFRESH_ERROR:
            return SessionOutcome(record, SessionState.ERRORED)

        if not is_token_expired(
            record.access_token_expires_at, now=self._clock(), buffer=self._buffer
        ):
            return SessionOutcome(record, SessionState.VALID)

        if not record.refresh_token:
            logger.warning(
                "Access token expired for subject %s and no refresh token is available",
                record.subject_id,
            )
            return SessionOutcome(
                record.model_copy(update={"status": CredentialStatus.REFRESH_ERROR}),
                SessionState.ERRORED,
            )

        logger.info(
            "Access token for subject %s is %s, refreshing",
            record.subject_id,
            SessionState.EXPIRING.value,
        )
        try:
            refreshed = await self._engine.refresh(record.refresh_token)
        except RefreshFailure as exc:
            logger.error(
                "Refreshing access token for subject %s failed: %s", record.subject_id, exc
            )
            return SessionOutcome(
                record.model_copy(update={"status": CredentialStatus.REFRESH_ERROR}),
                SessionState.ERRORED,
            )

        updated = record.model_copy(
            update={
                "access_token": refreshed.access_token,
                "access_token_expires_at": refreshed.access_token_expires_at,
                "refresh_token": refreshed.refresh_token or record.refresh_token,
                "status": CredentialStatus.VALID,
            }
        )
        return SessionOutcome(updated, SessionState.REFRESHED)


def to_session_view(record: CredentialRecord, expires: datetime) -> SessionView:
    """Project a credential record into the shape collaborators consume."""
    return SessionView(
        access_token=record.access_token,
        refresh_token=record.refresh_token,
        id_token=record.id_token,
        error=record.error,
        access_token_expires_at=ms_to_datetime(record.access_token_expires_at),
        expires=expires,
        user=SessionUser(
            id=record.subject_id,
            name=record.name,
            email=record.email,
            image=record.picture,
        ),
    )


__all__ = [
    "SessionLifecycleController",
    "SessionOutcome",
    "SessionState",
    "to_session_view",
]
