"""
FastAPI application entrypoint for the workspace gateway.
"""

from __future__ import annotations

from fastapi import FastAPI

from suite_gateway.api.dashboard import router as dashboard_router
from suite_gateway.api.gate import AccessGateMiddleware
from suite_gateway.api.google import router as google_router
from suite_gateway.api.routes import router as api_router
from suite_gateway.core.config import get_settings
from suite_gateway.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Suite Gateway",
        version="0.1.0",
        description="Delegated read-only access to Gmail, Calendar and Drive.",
    )
    app.add_middleware(AccessGateMiddleware)
    app.include_router(api_router, prefix="/api")
    app.include_router(google_router, prefix="/api")
    app.include_router(dashboard_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
