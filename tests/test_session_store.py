try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
import time

import pytest

from suite_gateway.models.credentials import CredentialRecord, CredentialStatus
from suite_gateway.services.session_store import InvalidSessionToken, SessionTokenStore

THIRTY_DAYS = 30 * 24 * 60 * 60


def _record(**overrides) -> CredentialRecord:
    fields = {
        "subject_id": "user-1",
        "access_token": "A1",
        "refresh_token": "R1",
        "id_token": "I1",
        "access_token_expires_at": 1_700_003_600_000,
        "email": "ada@example.com",
    }
    fields.update(overrides)
    return CredentialRecord(**fields)


def test_session_token_roundtrip_preserves_record() -> None:
    store = SessionTokenStore(secret="session-secret", max_age_seconds=THIRTY_DAYS)
    record = _record(
        access_token="ya29.plaintext-access-token", status=CredentialStatus.REFRESH_ERROR
    )

    token = store.encode(record)

    assert "ya29.plaintext-access-token" not in token
    assert store.decode(token) == record


def test_session_token_from_other_secret_is_rejected() -> None:
    issuer = SessionTokenStore(secret="one-secret", max_age_seconds=THIRTY_DAYS)
    reader = SessionTokenStore(secret="another-secret", max_age_seconds=THIRTY_DAYS)

    with pytest.raises(InvalidSessionToken):
        reader.decode(issuer.encode(_record()))


def test_tampered_session_token_is_rejected() -> None:
    store = SessionTokenStore(secret="session-secret", max_age_seconds=THIRTY_DAYS)
    token = store.encode(_record())
    tampered = token[:-4] + ("AAAA" if not token.endswith("AAAA") else "BBBB")

    with pytest.raises(InvalidSessionToken):
        store.decode(tampered)
    with pytest.raises(InvalidSessionToken):
        store.decode("not-a-session-token")


def test_session_token_older_than_max_age_is_rejected() -> None:
    store = SessionTokenStore(secret="session-secret", max_age_seconds=60)
    payload = _record().model_dump_json().encode("utf-8")
    stale = store._fernet.encrypt_at_time(payload, int(time.time()) - 120).decode("utf-8")

    with pytest.raises(InvalidSessionToken):
        store.decode(stale)


def test_session_token_with_unexpected_payload_is_rejected() -> None:
    store = SessionTokenStore(secret="session-secret", max_age_seconds=THIRTY_DAYS)
    token = store._fernet.encrypt(json.dumps({"access_token": "A1"}).encode("utf-8"))

    with pytest.raises(InvalidSessionToken):
        store.decode(token.decode("utf-8"))


def test_expires_at_is_issue_time_plus_max_age() -> None:
    store = SessionTokenStore(secret="session-secret", max_age_seconds=THIRTY_DAYS)
    before = int(time.time())

    expires = store.expires_at(store.encode(_record()))

    assert before + THIRTY_DAYS <= expires.timestamp() <= int(time.time()) + THIRTY_DAYS


def test_session_store_requires_secret() -> None:
    with pytest.raises(ValueError):
        SessionTokenStore(secret="", max_age_seconds=THIRTY_DAYS)
