"""Request logging middleware.

- Adds a unique X-Request-ID header to responses (and uses any incoming header)
- Binds the request and GitHub delivery ids to every log record of the request
- Does not log request/response bodies; webhook payloads are not logged
"""
from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shiphook.logging import delivery_context

logger = logging.getLogger("shiphook.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        start = time.monotonic()

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        delivery_id = request.headers.get("X-GitHub-Delivery")

        with delivery_context(request_id, delivery_id):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "Unhandled exception during request",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": int((time.monotonic() - start) * 1000),
                    },
                )
                raise

            logger.info(
                "Request finished",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )

        response.headers.setdefault("X-Request-ID", request_id)
        return response
