"""Apply pull request status transitions to versions."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from shiphook.models import CurrentVersion, Version, VersionStatus, Watch
from shiphook.repositories.contracts import WatchStore

logger = logging.getLogger(__name__)

HANDLED_ACTIONS = frozenset(
    {VersionStatus.OPENED, VersionStatus.CLOSED, VersionStatus.REOPENED}
)


class ReconcileOutcome(str, Enum):
    ADVANCED = "advanced"
    SKIPPED_STALE = "skipped_stale"
    NO_OP = "no_op"


def resolve_status(action: str, merged: bool) -> Optional[VersionStatus]:
    """
    Effective status for a pull request action, or None for actions that are
    not handled. A merged pull request is always recorded as merged.
    """
    try:
        status = VersionStatus(action)
    except ValueError:
        return None
    if status not in HANDLED_ACTIONS:
        return None
    return VersionStatus.MERGED if merged else status


class StatusReconciler:
    def __init__(self, watch_store: WatchStore) -> None:
        self.watch_store = watch_store

    def apply_status(
        self,
        watch: Watch,
        version: Version,
        status: VersionStatus,
        merged_at: Optional[datetime] = None,
    ) -> ReconcileOutcome:
        """
        Write ``status`` to the version and, on merge, move the watch's
        current version forward.

        The current sequence never decreases: a merge for a version older than
        the current one is recorded but leaves the pointer alone and reports
        SKIPPED_STALE. ``watch.current_version`` is kept in step with what was
        written so later calls in the same event compare against it.
        """
        self.watch_store.update_version_status(
            watch.id,
            version.sequence,
            status,
            merged_at=merged_at if status == VersionStatus.MERGED else None,
        )

        if status != VersionStatus.MERGED:
            return ReconcileOutcome.NO_OP

        current = watch.current_sequence
        if current is not None and version.sequence < current:
            logger.info(
                f"Not moving watch {watch.id} back from sequence {current} "
                f"to merged sequence {version.sequence}"
            )
            return ReconcileOutcome.SKIPPED_STALE

        if not self.watch_store.set_current_version(
            watch.id, version.sequence, merged_at
        ):
            # A concurrent delivery advanced the watch past this version
            logger.info(
                f"Watch {watch.id} already has a version newer than "
                f"sequence {version.sequence}"
            )
            return ReconcileOutcome.SKIPPED_STALE

        watch.current_version = CurrentVersion(
            sequence=version.sequence, merged_at=merged_at
        )
        return ReconcileOutcome.ADVANCED


__all__ = ["HANDLED_ACTIONS", "ReconcileOutcome", "StatusReconciler", "resolve_status"]
