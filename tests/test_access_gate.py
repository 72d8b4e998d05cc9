try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from suite_gateway.api.gate import evaluate_access, path_is_protected
from suite_gateway.core.clock import now_ms
from suite_gateway.dependencies import get_app_settings, get_session_store
from suite_gateway.main import app
from suite_gateway.models.credentials import CredentialRecord, CredentialStatus

PATTERNS = ("/dashboard/*",)


def _record(**overrides) -> CredentialRecord:
    fields = {
        "subject_id": "user-1",
        "access_token": "A1",
        "refresh_token": "R1",
        "access_token_expires_at": now_ms() + 3_600_000,
    }
    fields.update(overrides)
    return CredentialRecord(**fields)


@pytest.mark.parametrize(
    "path, protected",
    [
        ("/dashboard", True),
        ("/dashboard/", True),
        ("/dashboard/mail/inbox", True),
        ("/dashboards", False),
        ("/", False),
        ("/api/auth/session", False),
    ],
)
def test_protected_path_matching(path: str, protected: bool) -> None:
    assert path_is_protected(path, PATTERNS) is protected


def test_gate_denies_protected_path_without_session() -> None:
    decision = evaluate_access(
        "/dashboard/files", None, PATTERNS, sign_in_path="/", callback_url="/dashboard/files?x=1"
    )

    assert not decision.allowed
    assert decision.redirect_to == "/?callbackUrl=%2Fdashboard%2Ffiles%3Fx%3D1"


def test_gate_checks_presence_not_freshness() -> None:
    errored = _record(status=CredentialStatus.REFRESH_ERROR, access_token_expires_at=0)

    assert evaluate_access("/dashboard", errored, PATTERNS, sign_in_path="/").allowed


def test_gate_ignores_unprotected_paths() -> None:
    assert evaluate_access("/api/health", None, PATTERNS, sign_in_path="/").allowed


def _client(cookies: dict | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
        cookies=cookies,
    )


def _cookie_for(record: CredentialRecord) -> dict:
    settings = get_app_settings()
    return {settings.session.cookie_name: get_session_store().encode(record)}


@pytest.mark.anyio
async def test_dashboard_redirects_to_sign_in_without_session():
    async with _client() as client:
        response = await client.get("/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == "/?callbackUrl=%2Fdashboard"


@pytest.mark.anyio
async def test_dashboard_redirects_when_session_cookie_is_forged():
    settings = get_app_settings()
    async with _client({settings.session.cookie_name: "forged"}) as client:
        response = await client.get("/dashboard")

    assert response.status_code == 307


@pytest.mark.anyio
async def test_dashboard_allows_valid_session():
    async with _client(_cookie_for(_record(name="Ada"))) as client:
        response = await client.get("/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["user"] == {"id": "user-1", "name": "Ada"}
    assert data["error"] is None
    assert data["tokens"]["hasRefreshToken"] is True


@pytest.mark.anyio
async def test_dashboard_lets_errored_session_through_with_error_flag():
    errored = _record(status=CredentialStatus.REFRESH_ERROR)
    async with _client(_cookie_for(errored)) as client:
        response = await client.get("/dashboard")

    assert response.status_code == 200
    assert response.json()["error"] == "RefreshAccessTokenError"


@pytest.mark.anyio
async def test_unprotected_paths_pass_through():
    async with _client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
