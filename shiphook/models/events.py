"""Validated GitHub webhook payloads.

Only the fields the dispatchers read are modelled; everything else in the
payload is ignored. A body that does not fit the schema of its declared
event type is rejected instead of being trusted on the header alone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Account(_Payload):
    login: str
    id: Optional[int] = None
    type: str
    html_url: Optional[str] = None


class Sender(_Payload):
    login: str
    id: Optional[int] = None


class RepositoryOwner(_Payload):
    login: str


class Repository(_Payload):
    name: str
    owner: RepositoryOwner


class PullRequestBase(_Payload):
    repo: Repository


class PullRequest(_Payload):
    state: Optional[str] = None
    merged: bool = False
    merged_at: Optional[datetime] = None
    commits_url: Optional[str] = None
    base: PullRequestBase


class PullRequestEvent(_Payload):
    kind: Literal["pull_request"] = "pull_request"
    action: str
    number: int
    pull_request: PullRequest
    # Older deliveries carried merged_at at the top level
    merged_at: Optional[datetime] = None

    @property
    def repo_owner(self) -> str:
        return self.pull_request.base.repo.owner.login

    @property
    def repo_name(self) -> str:
        return self.pull_request.base.repo.name

    @property
    def effective_merged_at(self) -> Optional[datetime]:
        return self.pull_request.merged_at or self.merged_at


class Installation(_Payload):
    id: int
    account: Account
    access_tokens_url: Optional[str] = None


class InstallationEvent(_Payload):
    kind: Literal["installation"] = "installation"
    action: str
    installation: Installation
    sender: Sender


class IgnoredEvent(BaseModel):
    kind: Literal["ignored"] = "ignored"
    event_type: Optional[str] = None
    reason: str


WebhookEvent = Union[PullRequestEvent, InstallationEvent, IgnoredEvent]

IGNORED_EVENT_TYPES = frozenset(
    {
        "installation_repositories",
        "integration_installation",
        "integration_installation_repositories",
    }
)

_EVENT_MODELS = {
    "pull_request": PullRequestEvent,
    "installation": InstallationEvent,
}


class InvalidPayloadError(ValueError):
    def __init__(self, event_type: str, error: ValidationError):
        super().__init__(
            f"Payload for {event_type} event failed validation: "
            f"{error.error_count()} error(s)"
        )
        self.event_type = event_type
        self.errors = error.errors()


def parse_event(event_type: Optional[str], payload: Dict[str, Any]) -> WebhookEvent:
    """
    Classify a webhook delivery by its event header and validate the body.

    Raises InvalidPayloadError when the body does not match the schema of a
    handled event type.
    """
    if event_type in IGNORED_EVENT_TYPES:
        return IgnoredEvent(event_type=event_type, reason="event_ignored")

    model = _EVENT_MODELS.get(event_type or "")
    if model is None:
        return IgnoredEvent(event_type=event_type, reason="event_not_handled")

    # Never let the body pick its own variant
    body = {key: value for key, value in payload.items() if key != "kind"}
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise InvalidPayloadError(event_type, exc) from exc


__all__ = [
    "Account",
    "IgnoredEvent",
    "Installation",
    "InstallationEvent",
    "InvalidPayloadError",
    "PullRequest",
    "PullRequestEvent",
    "Sender",
    "WebhookEvent",
    "IGNORED_EVENT_TYPES",
    "parse_event",
]
