"""Locate the tracked version a pull request refers to."""

from __future__ import annotations

from typing import Optional

from shiphook.models import Version, Watch
from shiphook.repositories.contracts import WatchStore


class VersionMatcher:
    """
    Two generations of matching coexist.

    Versions recorded before commit tracking only carry a pull request number
    and are found by scanning the watch's pending then past versions. Newer
    versions carry the commit they were built from and are found per commit.
    A version that has a commit sha is never matched by number, so one event
    cannot reach it through both paths.
    """

    def __init__(self, watch_store: WatchStore) -> None:
        self.watch_store = watch_store

    def match_by_legacy_number(self, watch: Watch, pr_number: int) -> Optional[Version]:
        for version in self.watch_store.list_pending_versions(watch.id):
            if _legacy_match(version, pr_number):
                return version
        for version in self.watch_store.list_past_versions(watch.id):
            if _legacy_match(version, pr_number):
                return version
        return None

    def match_by_commit(self, watch: Watch, commit_sha: str) -> Optional[Version]:
        if not commit_sha:
            return None
        return self.watch_store.get_version_for_commit(watch.id, commit_sha)


def _legacy_match(version: Version, pr_number: int) -> bool:
    return not version.tracks_commit and version.pull_request_number == pr_number
