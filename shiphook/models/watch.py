from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .base import BaseEntity, PyObjectId


class VersionStatus(str, Enum):
    PENDING = "pending"
    OPENED = "opened"
    CLOSED = "closed"
    REOPENED = "reopened"
    MERGED = "merged"


# A version moves to the past partition once its status is terminal.
# A closed pull request can still be reopened, so only merged counts.
TERMINAL_STATUSES = frozenset({VersionStatus.MERGED})


class CurrentVersion(BaseModel):
    sequence: int
    merged_at: Optional[datetime] = None


class Watch(BaseEntity):
    cluster_id: PyObjectId
    slug: str
    title: Optional[str] = None
    current_version: Optional[CurrentVersion] = None

    @property
    def current_sequence(self) -> Optional[int]:
        return self.current_version.sequence if self.current_version else None


class Version(BaseEntity):
    watch_id: PyObjectId
    sequence: int = Field(..., ge=0)
    status: VersionStatus = Field(default=VersionStatus.PENDING)
    commit_sha: Optional[str] = None
    pull_request_number: Optional[int] = None
    merged_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status not in TERMINAL_STATUSES

    @property
    def tracks_commit(self) -> bool:
        return bool(self.commit_sha)
