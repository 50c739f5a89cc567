from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from shiphook.models.events import (
    IgnoredEvent,
    InstallationEvent,
    InvalidPayloadError,
    PullRequestEvent,
    parse_event,
)
from shiphook.services.installation_dispatcher import InstallationDispatcher
from shiphook.services.pull_request_dispatcher import PullRequestDispatcher

logger = logging.getLogger(__name__)


def verify_signature(secret: Optional[str], signature: Optional[str], body: bytes) -> None:
    """Check X-Hub-Signature-256 when a webhook secret is configured."""
    if not secret:
        return

    if not signature or not signature.startswith("sha256="):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature"
        )

    digest = hmac.new(
        secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()

    expected = f"sha256={digest}"
    if not hmac.compare_digest(expected, signature):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Webhook signature mismatch",
        )


class GithubWebhookService:
    """
    Entry point for GitHub deliveries. Every classified delivery is
    acknowledged; retries are GitHub's concern, so failures inside a
    dispatcher are logged and reported in the response body instead.
    """

    def __init__(
        self,
        pull_requests: PullRequestDispatcher,
        installations: InstallationDispatcher,
    ) -> None:
        self.pull_requests = pull_requests
        self.installations = installations

    def handle_github_event(
        self, event_type: Optional[str], payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        logger.info(f"Received GitHub hook for event type {event_type}")

        try:
            event = parse_event(event_type, payload)
        except InvalidPayloadError as exc:
            logger.warning(str(exc), extra={"validation_errors": exc.errors})
            return {"status": "ignored", "reason": "invalid_payload"}

        if isinstance(event, IgnoredEvent):
            if event.reason == "event_not_handled":
                logger.info(f"Unexpected event type in GitHub hook: {event_type}")
            return {"status": "ignored", "reason": event.reason}

        try:
            if isinstance(event, PullRequestEvent):
                report = self.pull_requests.handle_pull_request_event(event)
                if report.ignored:
                    return {"status": "ignored", "reason": f"action_{event.action}"}
                return {"status": "processed", **report.as_dict()}
            if isinstance(event, InstallationEvent):
                return self.installations.handle_installation_event(event)
        except Exception:
            logger.exception(f"Failed to handle GitHub {event_type} event")
            return {"status": "processed", "error": "dispatch_failed"}

        return {"status": "ignored", "reason": "event_not_handled"}


__all__ = ["GithubWebhookService", "verify_signature"]
