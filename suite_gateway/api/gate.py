"""
Access gate for protected paths.

The gate only checks that a decodable session exists. Token freshness is the
session lifecycle's concern; a session marked with a refresh error still
passes here and is rejected by the route that tries to use it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Callable, Iterable, Optional
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from suite_gateway.core.config import AppSettings
from suite_gateway.dependencies.clients import get_session_store
from suite_gateway.dependencies.config import get_app_settings
from suite_gateway.dependencies.session import read_session_record
from suite_gateway.models.credentials import CredentialRecord
from suite_gateway.services import SessionTokenStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect_to: Optional[str] = None


ALLOW = GateDecision(allowed=True)


def path_is_protected(path: str, patterns: Iterable[str]) -> bool:
    """Match ``path`` against patterns like ``/dashboard/*`` or ``/reports``.

    A trailing ``/*`` covers the bare prefix and everything below it.
    """
    for pattern in patterns:
        if pattern.endswith("/*"):
            prefix = pattern[:-2].rstrip("/")
            if path == prefix or path.startswith(prefix + "/"):
                return True
        elif path == pattern:
            return True
    return False


def sign_in_redirect(sign_in_path: str, callback_url: str) -> str:
    return f"{sign_in_path}?{urlencode({'callbackUrl': callback_url})}"


def evaluate_access(
    path: str,
    record: Optional[CredentialRecord],
    patterns: Iterable[str],
    *,
    sign_in_path: str,
    callback_url: Optional[str] = None,
) -> GateDecision:
    """Allow unprotected paths and protected paths with a session present."""
    if not path_is_protected(path, patterns):
        return ALLOW
    if record is not None:
        return ALLOW
    return GateDecision(
        allowed=False,
        redirect_to=sign_in_redirect(sign_in_path, callback_url or path),
    )


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Redirect unauthenticated requests for protected paths to sign-in."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings_provider: Callable[[], AppSettings] = get_app_settings,
        store_provider: Callable[[], SessionTokenStore] = get_session_store,
    ) -> None:
        super().__init__(app)
        self._settings_provider = settings_provider
        self._store_provider = store_provider

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        settings = self._settings_provider()
        path = request.url.path
        if not path_is_protected(path, settings.session.protected_paths):
            return await call_next(request)

        record = read_session_record(request, settings, self._store_provider())
        callback_url = path
        if request.url.query:
            callback_url = f"{path}?{request.url.query}"
        decision = evaluate_access(
            path,
            record,
            settings.session.protected_paths,
            sign_in_path=settings.sign_in_path,
            callback_url=callback_url,
        )
        if not decision.allowed:
            logger.info("No session for protected path %s, redirecting to sign-in", path)
            return RedirectResponse(
                url=decision.redirect_to, status_code=HTTPStatus.TEMPORARY_REDIRECT
            )
        return await call_next(request)


__all__ = [
    "AccessGateMiddleware",
    "GateDecision",
    "evaluate_access",
    "path_is_protected",
    "sign_in_redirect",
]
