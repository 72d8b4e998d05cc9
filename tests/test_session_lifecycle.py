from __future__ import annotations

from datetime import datetime, timezone

import pytest

from suite_gateway.models.credentials import (
    CredentialRecord,
    CredentialStatus,
    RefreshedTokens,
    SignInGrant,
)
from suite_gateway.services.session_lifecycle import (
    SessionLifecycleController,
    SessionState,
    to_session_view,
)
from suite_gateway.services.token_refresh import RefreshFailure

HOUR_MS = 3_600_000
BUFFER_MS = 5 * 60 * 1000


class StubRefreshEngine:
    def __init__(self, results: list[RefreshedTokens | Exception] | None = None) -> None:
        self.results = list(results or [])
        self.calls: list[str] = []

    async def refresh(self, refresh_token: str) -> RefreshedTokens:
        self.calls.append(refresh_token)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _grant(now_ms: int, **overrides) -> SignInGrant:
    fields = {
        "subject_id": "user-1",
        "access_token": "A1",
        "refresh_token": "R1",
        "id_token": "I1",
        "expires_at": (now_ms + HOUR_MS) // 1000,
        "email": "ada@example.com",
    }
    fields.update(overrides)
    return SignInGrant(**fields)


def _record(expires_at: int, **overrides) -> CredentialRecord:
    fields = {
        "subject_id": "user-1",
        "access_token": "A1",
        "refresh_token": "R1",
        "id_token": "I1",
        "access_token_expires_at": expires_at,
    }
    fields.update(overrides)
    return CredentialRecord(**fields)


@pytest.mark.asyncio
async def test_sign_in_seeds_record_from_grant(clock) -> None:
    engine = StubRefreshEngine()
    controller = SessionLifecycleController(engine, clock=clock)

    outcome = await controller.materialize(None, grant=_grant(clock.now))

    assert outcome.state is SessionState.FRESH
    assert outcome.record.access_token == "A1"
    assert outcome.record.refresh_token == "R1"
    assert outcome.record.id_token == "I1"
    assert outcome.record.subject_id == "user-1"
    assert outcome.record.status is CredentialStatus.VALID
    assert outcome.record.access_token_expires_at == (clock.now + HOUR_MS) // 1000 * 1000
    assert engine.calls == []


@pytest.mark.asyncio
async def test_sign_in_without_expiry_defaults_to_one_hour(clock) -> None:
    controller = SessionLifecycleController(StubRefreshEngine(), clock=clock)

    outcome = await controller.materialize(None, grant=_grant(clock.now, expires_at=None))

    assert outcome.record.access_token_expires_at == clock.now + HOUR_MS


@pytest.mark.asyncio
async def test_sign_in_grant_replaces_an_errored_record(clock) -> None:
    controller = SessionLifecycleController(StubRefreshEngine(), clock=clock)
    errored = _record(clock.now - HOUR_MS, status=CredentialStatus.REFRESH_ERROR)

    outcome = await controller.materialize(errored, grant=_grant(clock.now, access_token="A9"))

    assert outcome.record.status is CredentialStatus.VALID
    assert outcome.record.access_token == "A9"


@pytest.mark.asyncio
async def test_immediate_access_after_sign_in_returns_record_unchanged(clock) -> None:
    engine = StubRefreshEngine()
    controller = SessionLifecycleController(engine, clock=clock)
    seeded = (await controller.materialize(None, grant=_grant(clock.now))).record

    outcome = await controller.materialize(seeded)

    assert outcome.state is SessionState.VALID
    assert outcome.record is seeded
    assert engine.calls == []


@pytest.mark.asyncio
async def test_missing_session_materializes_to_nothing(clock) -> None:
    engine = StubRefreshEngine()
    outcome = await SessionLifecycleController(engine, clock=clock).materialize(None)

    assert outcome.record is None
    assert engine.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "remaining_ms, expect_refresh",
    [
        (BUFFER_MS + 60_000, False),
        (BUFFER_MS + 1, False),
        (BUFFER_MS, True),
        (BUFFER_MS - 1, True),
        (0, True),
        (-HOUR_MS, True),
    ],
)
async def test_expiry_is_judged_with_five_minute_buffer(
    clock, remaining_ms: int, expect_refresh: bool
) -> None:
    engine = StubRefreshEngine(
        [RefreshedTokens(access_token="A2", access_token_expires_at=clock.now + HOUR_MS)]
    )
    controller = SessionLifecycleController(engine, clock=clock)

    await controller.materialize(_record(clock.now + remaining_ms))

    assert engine.calls == (["R1"] if expect_refresh else [])


@pytest.mark.asyncio
async def test_refresh_keeps_prior_refresh_token_when_not_rotated(clock) -> None:
    signed_in_at = clock.now
    engine = StubRefreshEngine(
        [RefreshedTokens(access_token="A2", access_token_expires_at=signed_in_at + 2 * HOUR_MS)]
    )
    controller = SessionLifecycleController(engine, clock=clock)
    seeded = (await controller.materialize(None, grant=_grant(signed_in_at))).record

    clock.now = seeded.access_token_expires_at - BUFFER_MS
    outcome = await controller.materialize(seeded)

    assert engine.calls == ["R1"]
    assert outcome.state is SessionState.REFRESHED
    assert outcome.record.access_token == "A2"
    assert outcome.record.refresh_token == "R1"
    assert outcome.record.id_token == "I1"
    assert outcome.record.status is CredentialStatus.VALID
    assert outcome.record.access_token_expires_at == signed_in_at + 2 * HOUR_MS
    assert seeded.access_token == "A1"


@pytest.mark.asyncio
async def test_refresh_adopts_rotated_refresh_token(clock) -> None:
    engine = StubRefreshEngine(
        [
            RefreshedTokens(
                access_token="A2",
                access_token_expires_at=clock.now + HOUR_MS,
                refresh_token="R2",
            )
        ]
    )
    controller = SessionLifecycleController(engine, clock=clock)

    outcome = await controller.materialize(_record(clock.now - 1))

    assert outcome.record.refresh_token == "R2"


@pytest.mark.asyncio
async def test_identity_token_survives_repeated_refreshes(clock) -> None:
    engine = StubRefreshEngine(
        [
            RefreshedTokens(
                access_token=f"A{index}",
                access_token_expires_at=clock.now + index * HOUR_MS,
                refresh_token=f"R{index}" if index % 2 else None,
            )
            for index in range(2, 7)
        ]
    )
    controller = SessionLifecycleController(engine, clock=clock)
    record = (await controller.materialize(None, grant=_grant(clock.now))).record

    for _ in range(5):
        clock.now = record.access_token_expires_at
        record = (await controller.materialize(record)).record
        assert record.id_token == "I1"
        assert record.subject_id == "user-1"

    assert len(engine.calls) == 5


@pytest.mark.asyncio
async def test_revoked_refresh_token_marks_session_errored(clock) -> None:
    engine = StubRefreshEngine([RefreshFailure("Provider rejected the refresh token.")])
    controller = SessionLifecycleController(engine, clock=clock)

    outcome = await controller.materialize(_record(clock.now - 1))

    assert outcome.state is SessionState.ERRORED
    assert outcome.record.status is CredentialStatus.REFRESH_ERROR
    assert outcome.record.error == "RefreshAccessTokenError"
    assert outcome.record.access_token == "A1"
    assert outcome.record.refresh_token == "R1"


@pytest.mark.asyncio
async def test_refresh_error_is_sticky(clock) -> None:
    engine = StubRefreshEngine([RefreshFailure("revoked")])
    controller = SessionLifecycleController(engine, clock=clock)
    errored = (await controller.materialize(_record(clock.now - 1))).record

    for _ in range(3):
        clock.advance(HOUR_MS)
        outcome = await controller.materialize(errored)
        assert outcome.state is SessionState.ERRORED
        assert outcome.record.status is CredentialStatus.REFRESH_ERROR

    assert engine.calls == ["R1"]


@pytest.mark.asyncio
async def test_expired_record_without_refresh_token_errors_without_network(clock) -> None:
    engine = StubRefreshEngine()
    controller = SessionLifecycleController(engine, clock=clock)

    outcome = await controller.materialize(_record(clock.now - 1, refresh_token=None))

    assert outcome.state is SessionState.ERRORED
    assert outcome.record.status is CredentialStatus.REFRESH_ERROR
    assert engine.calls == []


def test_session_view_exposes_collaborator_fields() -> None:
    record = _record(1_700_003_600_000, status=CredentialStatus.REFRESH_ERROR, name="Ada")
    expires = datetime(2030, 1, 1, tzinfo=timezone.utc)

    view = to_session_view(record, expires)
    payload = view.model_dump(by_alias=True, mode="json", exclude_none=True)

    assert payload["accessToken"] == "A1"
    assert payload["refreshToken"] == "R1"
    assert payload["idToken"] == "I1"
    assert payload["error"] == "RefreshAccessTokenError"
    assert payload["user"] == {"id": "user-1", "name": "Ada"}
