"""
Per-request session materialization.

Each request decodes its own copy of the credential record from the session
cookie, runs it through the lifecycle controller and writes the result back
as a new cookie. Nothing is shared between concurrent requests.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request, Response

from suite_gateway.core.config import AppSettings
from suite_gateway.dependencies.clients import get_session_controller, get_session_store
from suite_gateway.dependencies.config import get_app_settings
from suite_gateway.models.credentials import CredentialRecord
from suite_gateway.schemas.session import SessionView
from suite_gateway.services import (
    InvalidSessionToken,
    SessionLifecycleController,
    SessionTokenStore,
    to_session_view,
)

logger = logging.getLogger(__name__)


def set_session_cookie(
    response: Response,
    token: str,
    settings: AppSettings,
) -> None:
    response.set_cookie(
        key=settings.session.cookie_name,
        value=token,
        max_age=settings.session.max_age_seconds,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: AppSettings) -> None:
    response.delete_cookie(
        settings.session.cookie_name,
        path="/",
        secure=settings.secure_cookies,
        httponly=True,
        samesite="lax",
    )


def set_state_cookie(response: Response, nonce: str, settings: AppSettings) -> None:
    """Tie a pending sign-in to this browser for the lifetime of its state."""
    response.set_cookie(
        key=settings.oauth.state_cookie_name,
        value=nonce,
        max_age=settings.oauth.state_ttl_seconds,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        path="/",
    )


def clear_state_cookie(response: Response, settings: AppSettings) -> None:
    response.delete_cookie(
        settings.oauth.state_cookie_name,
        path="/",
        secure=settings.secure_cookies,
        httponly=True,
        samesite="lax",
    )


def read_session_record(
    request: Request, settings: AppSettings, store: SessionTokenStore
) -> Optional[CredentialRecord]:
    """Decode the session cookie without touching token freshness."""
    token = request.cookies.get(settings.session.cookie_name)
    if not token:
        return None
    try:
        return store.decode(token)
    except InvalidSessionToken as exc:
        logger.info("Ignoring unusable session token: %s", exc)
        return None


async def get_current_session(
    request: Request,
    response: Response,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    store: Annotated[SessionTokenStore, Depends(get_session_store)],
    controller: Annotated[SessionLifecycleController, Depends(get_session_controller)],
) -> Optional[SessionView]:
    """Materialize the caller's session, refreshing the access token when due."""
    record = read_session_record(request, settings, store)
    if record is None:
        if settings.session.cookie_name in request.cookies:
            clear_session_cookie(response, settings)
        return None

    outcome = await controller.materialize(record)
    if outcome.record is None:  # pragma: no cover - materialize keeps existing records
        return None

    token = store.encode(outcome.record)
    set_session_cookie(response, token, settings)
    return to_session_view(outcome.record, store.expires_at(token))


CurrentSession = Annotated[Optional[SessionView], Depends(get_current_session)]

__all__ = [
    "CurrentSession",
    "clear_session_cookie",
    "clear_state_cookie",
    "get_current_session",
    "read_session_record",
    "set_session_cookie",
    "set_state_cookie",
]
