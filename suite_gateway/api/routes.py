"""
FastAPI routes for sign-in, sign-out and session inspection.
"""

from __future__ import annotations

import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Annotated, Any, Dict, Optional
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse

from suite_gateway.clients.google_auth import (
    GoogleOAuthClient,
    InvalidOAuthState,
    OAuthStateEncoder,
    OAuthTokenExchangeError,
)
from suite_gateway.core.config import AppSettings
from suite_gateway.dependencies import (
    CurrentSession,
    clear_session_cookie,
    clear_state_cookie,
    get_app_settings,
    get_google_oauth_client,
    get_oauth_state_encoder,
    get_session_controller,
    get_session_store,
    set_session_cookie,
    set_state_cookie,
)
from suite_gateway.models.credentials import SignInGrant, TokenGrant
from suite_gateway.services import (
    MalformedIdentityToken,
    SessionLifecycleController,
    SessionTokenStore,
    describe_identity_token,
)
from suite_gateway.services.identity_token import decode_claims, profile_from_claims

router = APIRouter()
logger = logging.getLogger(__name__)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _safe_callback_url(callback_url: Optional[str], default: str) -> str:
    """Only allow same-site relative redirects after sign-in."""
    if not callback_url:
        return default
    parsed = urlparse(callback_url.strip())
    if parsed.scheme or parsed.netloc or not parsed.path.startswith("/"):
        logger.warning("Unsafe callback URL ignored: %s", callback_url)
        return default
    if parsed.path.startswith("//"):
        return default
    return callback_url.strip()


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/signin", status_code=HTTPStatus.OK)
async def start_sign_in(
    request: Request,
    response: Response,
    oauth_client: Annotated[GoogleOAuthClient, Depends(get_google_oauth_client)],
    state_encoder: Annotated[OAuthStateEncoder, Depends(get_oauth_state_encoder)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    callback_url: Optional[str] = Query(
        default=None,
        alias="callbackUrl",
        description="Relative URL to return to once sign-in completes.",
    ),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Google consent screen.",
    ),
) -> Any:
    """Kick off sign-in by generating a signed state token and consent URL."""
    nonce = uuid.uuid4().hex
    state_payload = {
        "nonce": nonce,
        "callback_url": _safe_callback_url(callback_url, settings.post_sign_in_path),
        "issued_at": datetime.now(timezone.utc).isoformat(),
    }
    state = state_encoder.encode(state_payload)
    authorization_url = oauth_client.build_authorization_url(state=state)

    if redirect or _wants_html(request):
        consent = RedirectResponse(
            url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
        set_state_cookie(consent, nonce, settings)
        return consent

    set_state_cookie(response, nonce, settings)
    return {"authorization_url": authorization_url, "state": state}


async def _resolve_sign_in_grant(
    oauth_client: GoogleOAuthClient, grant: TokenGrant
) -> SignInGrant:
    """Attach the user's subject and profile to a fresh token grant."""
    profile: Dict[str, Optional[str]] = {}
    if grant.id_token:
        try:
            profile = profile_from_claims(decode_claims(grant.id_token))
        except MalformedIdentityToken as exc:
            logger.warning("Identity token in grant is unreadable, using userinfo: %s", exc)

    if not profile.get("subject_id"):
        try:
            userinfo = await oauth_client.fetch_user_profile(grant.access_token)
        except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
            raise HTTPException(
                status_code=HTTPStatus.BAD_REQUEST,
                detail="Could not resolve the signed-in user.",
            ) from exc
        profile = profile_from_claims(userinfo)

    if not profile.get("subject_id"):
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Identity provider did not return a subject identifier.",
        )
    return SignInGrant(**grant.model_dump(), **profile)


@router.get("/auth/callback/google")
async def handle_google_callback(
    request: Request,
    oauth_client: Annotated[GoogleOAuthClient, Depends(get_google_oauth_client)],
    state_encoder: Annotated[OAuthStateEncoder, Depends(get_oauth_state_encoder)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    store: Annotated[SessionTokenStore, Depends(get_session_store)],
    controller: Annotated[SessionLifecycleController, Depends(get_session_controller)],
    state: Optional[str] = Query(default=None, description="OAuth state token."),
    code: Optional[str] = Query(default=None, description="Authorization code."),
    error: Optional[str] = Query(default=None, description="Provider error code."),
) -> Response:
    """Complete sign-in: exchange the code, seed the session and set the cookie."""
    if error:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail=f"Google sign-in failed: {error}"
        )
    if not state or not code:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Missing authorization code or state.",
        )

    try:
        state_data = state_encoder.decode(state)
    except InvalidOAuthState as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc)) from exc

    try:
        issued_at = datetime.fromisoformat(state_data["issued_at"])
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Missing or invalid issued_at in state token.",
        ) from exc
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)

    now = datetime.now(timezone.utc)
    if now - issued_at > timedelta(seconds=settings.oauth.state_ttl_seconds):
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="OAuth state token has expired."
        )

    nonce = state_data.get("nonce")
    bound_nonce = request.cookies.get(settings.oauth.state_cookie_name)
    if (
        not isinstance(nonce, str)
        or not bound_nonce
        or not hmac.compare_digest(nonce.encode("utf-8"), bound_nonce.encode("utf-8"))
    ):
        logger.warning("OAuth callback state does not belong to this browser")
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Sign-in was not started from this browser.",
        )

    try:
        token_grant = await oauth_client.exchange_authorization_code(code)
    except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
        logger.warning("Authorization code exchange failed: %s", exc)
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Failed to exchange authorization code.",
        ) from exc

    sign_in_grant = await _resolve_sign_in_grant(oauth_client, token_grant)
    outcome = await controller.materialize(None, grant=sign_in_grant)

    callback_url = _safe_callback_url(state_data.get("callback_url"), settings.post_sign_in_path)
    response = RedirectResponse(url=callback_url, status_code=HTTPStatus.FOUND)
    set_session_cookie(response, store.encode(outcome.record), settings)
    clear_state_cookie(response, settings)
    return response


@router.get("/auth/session")
async def read_session(session: CurrentSession) -> dict:
    """Return the materialized session, or an empty object when signed out."""
    if session is None:
        return {}
    return session.model_dump(by_alias=True, mode="json", exclude_none=True)


@router.post("/auth/signout")
async def sign_out(
    request: Request,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> Any:
    """Discard the local session token. Provider tokens are not revoked."""
    if _wants_html(request):
        redirect = RedirectResponse(url=settings.sign_in_path, status_code=HTTPStatus.SEE_OTHER)
        clear_session_cookie(redirect, settings)
        return redirect
    clear_session_cookie(response, settings)
    return {"status": "signed_out"}


@router.get("/auth/id-token")
async def read_identity_token(session: CurrentSession, response: Response) -> dict:
    """Decoded identity token claims for display."""
    if session is None:
        response.status_code = HTTPStatus.UNAUTHORIZED
        return {"error": "Unauthorized - No valid session"}
    if not session.id_token:
        response.status_code = HTTPStatus.NOT_FOUND
        return {"error": "No identity token captured for this session."}
    try:
        details = describe_identity_token(session.id_token)
    except MalformedIdentityToken as exc:
        response.status_code = HTTPStatus.UNPROCESSABLE_ENTITY
        return {"error": str(exc)}
    return details.model_dump(by_alias=True, mode="json", exclude_none=True)


__all__ = ["router"]
