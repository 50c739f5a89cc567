"""FastAPI application entry point."""

import logging

from fastapi import FastAPI

from shiphook.api import health, webhook
from shiphook.config import get_settings
from shiphook.logging import setup_logging
from shiphook.middleware.request_logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description="GitHub webhook receiver for watch deployment versions",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url=None,
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(webhook.router, prefix="/api", tags=["Webhooks"])
    return app


app = create_app()
