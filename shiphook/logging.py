"""JSON logging with trace and webhook delivery correlation."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

from opentelemetry import trace
from pythonjsonlogger import jsonlogger

# Set per request by RequestLoggingMiddleware; copied into worker threads
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
github_delivery_var: ContextVar[Optional[str]] = ContextVar(
    "github_delivery", default=None
)


@contextmanager
def delivery_context(
    request_id: Optional[str], github_delivery: Optional[str]
) -> Iterator[None]:
    """Tag every record logged inside the block with the request and delivery ids."""
    request_token = request_id_var.set(request_id)
    delivery_token = github_delivery_var.set(github_delivery)
    try:
        yield
    finally:
        github_delivery_var.reset(delivery_token)
        request_id_var.reset(request_token)


class DeliveryJSONFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that adds the current webhook delivery and OpenTelemetry
    trace/span identifiers to each record.

    Dispatcher logs for one delivery can then be grouped by ``github_delivery``
    even though they are emitted far from the request handler.
    """

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        for key, var in (
            ("request_id", request_id_var),
            ("github_delivery", github_delivery_var),
        ):
            value = var.get()
            if value and not log_record.get(key):
                log_record[key] = value

        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            log_record["trace_id"] = trace.format_trace_id(ctx.trace_id)
            log_record["span_id"] = trace.format_span_id(ctx.span_id)

        log_record["level"] = str(log_record.get("level") or record.levelname).upper()


def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        DeliveryJSONFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Request lines come from RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("httpx").setLevel("WARNING")
