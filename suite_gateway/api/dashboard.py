"""Protected dashboard summary. Reached only through the access gate."""

from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, Response

from suite_gateway.dependencies import CurrentSession

router = APIRouter()


@router.get("/dashboard")
async def dashboard(session: CurrentSession, response: Response) -> dict:
    if session is None:
        response.status_code = HTTPStatus.UNAUTHORIZED
        return {"error": "Unauthorized - No valid session"}

    return {
        "user": session.user.model_dump(exclude_none=True),
        "error": session.error,
        "expires": session.expires.isoformat(),
        "tokens": {
            "hasAccessToken": bool(session.access_token),
            "hasRefreshToken": bool(session.refresh_token),
            "hasIdToken": bool(session.id_token),
            "idTokenLength": len(session.id_token or ""),
            "accessTokenExpiresAt": session.access_token_expires_at.isoformat(),
        },
    }


__all__ = ["router"]
