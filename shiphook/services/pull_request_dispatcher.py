"""Reconcile pull request webhooks against tracked watch versions."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional

from redis import Redis

from shiphook.github_auth import GithubAppCredentials
from shiphook.github_exceptions import GithubConfigurationError, GithubError
from shiphook.models import Cluster, Version, VersionStatus, Watch
from shiphook.models.events import PullRequestEvent
from shiphook.repositories.contracts import ClusterStore, WatchStore
from shiphook.services.status_reconciler import (
    ReconcileOutcome,
    StatusReconciler,
    resolve_status,
)
from shiphook.services.version_matcher import VersionMatcher
from shiphook.utils.locking import watch_lock

logger = logging.getLogger(__name__)

MatchedBy = Literal["pull_request_number", "commit"]
FailureScope = Literal["cluster", "watch"]


class CommitStep(str, Enum):
    CONTINUE = "continue"
    STOP_WATCH = "stop_watch"


def fold_commits(commit_shas: Iterable[str], step: Callable[[str], CommitStep]) -> int:
    """
    Run ``step`` over commits in order until one returns STOP_WATCH.
    Returns the number of commits visited.
    """
    visited = 0
    for sha in commit_shas:
        visited += 1
        if step(sha) is CommitStep.STOP_WATCH:
            break
    return visited


@dataclass
class VersionResult:
    watch_id: str
    sequence: int
    status: str
    outcome: str
    matched_by: MatchedBy
    commit_sha: Optional[str] = None


@dataclass
class UnitFailure:
    scope: FailureScope
    unit_id: str
    error: str


@dataclass
class PullRequestReport:
    action: str
    number: int
    effective_status: Optional[str] = None
    ignored: bool = False
    clusters: int = 0
    results: List[VersionResult] = field(default_factory=list)
    failures: List[UnitFailure] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PullRequestDispatcher:
    """
    Fans a pull request event out to every watch on clusters bound to the
    event's base repository.

    Versions that predate commit tracking are matched by pull request number
    first, then commit-tracked versions are matched against the pull request's
    commit list on clusters with a GitOps ref. Each cluster and watch is its
    own unit of work: failures are logged and recorded in the report, and the
    remaining units are still processed.
    """

    def __init__(
        self,
        cluster_store: ClusterStore,
        watch_store: WatchStore,
        credentials: GithubAppCredentials,
        redis_client: Optional[Redis] = None,
        lock_timeout: int = 30,
    ) -> None:
        self.cluster_store = cluster_store
        self.watch_store = watch_store
        self.credentials = credentials
        self.redis_client = redis_client
        self.lock_timeout = lock_timeout
        self.matcher = VersionMatcher(watch_store)
        self.reconciler = StatusReconciler(watch_store)

    def handle_pull_request_event(self, event: PullRequestEvent) -> PullRequestReport:
        report = PullRequestReport(action=event.action, number=event.number)

        status = resolve_status(event.action, event.pull_request.merged)
        if status is None:
            logger.info(f"Ignoring pull request action {event.action} for #{event.number}")
            report.ignored = True
            return report
        report.effective_status = status.value

        clusters = self.cluster_store.list_clusters_for_repo(
            event.repo_owner, event.repo_name
        )
        report.clusters = len(clusters)
        logger.info(
            f"Pull request {event.repo_owner}/{event.repo_name}#{event.number} "
            f"{status.value}: {len(clusters)} cluster(s)"
        )

        watches_by_cluster: Dict[str, List[Watch]] = {}

        # Versions created before commit shas were tracked
        for cluster in clusters:
            watches = self._list_watches(cluster, watches_by_cluster, report)
            for watch in watches or []:
                self._run_for_watch(
                    watch,
                    report,
                    lambda w=watch: self._reconcile_legacy(w, event, status, report),
                )

        for cluster in clusters:
            if cluster.git_ops_ref is None:
                continue
            commit_shas = self._fetch_commit_shas(cluster, event, report)
            if commit_shas is None:
                continue
            watches = self._list_watches(cluster, watches_by_cluster, report)
            for watch in watches or []:
                self._run_for_watch(
                    watch,
                    report,
                    lambda w=watch: self._reconcile_commits(
                        w, commit_shas, status, event.effective_merged_at, report
                    ),
                )

        return report

    def _list_watches(
        self,
        cluster: Cluster,
        cache: Dict[str, List[Watch]],
        report: PullRequestReport,
    ) -> Optional[List[Watch]]:
        key = str(cluster.id)
        if key in cache:
            return cache[key]
        try:
            watches = self.watch_store.list_for_cluster(cluster.id)
        except Exception as exc:
            logger.exception(f"Failed to list watches for cluster {cluster.id}")
            report.failures.append(UnitFailure("cluster", key, str(exc)))
            return None
        cache[key] = watches
        return watches

    def _run_for_watch(
        self, watch: Watch, report: PullRequestReport, work: Callable[[], None]
    ) -> None:
        try:
            with watch_lock(self.redis_client, str(watch.id), timeout=self.lock_timeout):
                work()
        except Exception as exc:
            logger.exception(f"Failed to reconcile watch {watch.id}")
            report.failures.append(UnitFailure("watch", str(watch.id), str(exc)))

    def _reconcile_legacy(
        self,
        watch: Watch,
        event: PullRequestEvent,
        status: VersionStatus,
        report: PullRequestReport,
    ) -> None:
        version = self.matcher.match_by_legacy_number(watch, event.number)
        if version is None:
            return
        outcome = self.reconciler.apply_status(
            watch, version, status, event.effective_merged_at
        )
        report.results.append(
            _result(watch, version, status, outcome, "pull_request_number")
        )

    def _fetch_commit_shas(
        self, cluster: Cluster, event: PullRequestEvent, report: PullRequestReport
    ) -> Optional[List[str]]:
        installation_id = cluster.git_ops_ref.installation_id
        try:
            with self.credentials.installation_client(installation_id) as gh:
                commits = gh.list_pull_request_commits(
                    event.repo_owner, event.repo_name, event.number
                )
        except GithubConfigurationError as exc:
            logger.error(f"GitHub App is not usable for cluster {cluster.id}: {exc}")
            report.failures.append(UnitFailure("cluster", str(cluster.id), str(exc)))
            return None
        except GithubError as exc:
            logger.warning(
                f"Could not fetch commits for #{event.number} with installation "
                f"{installation_id} (cluster {cluster.id}): {exc}"
            )
            report.failures.append(UnitFailure("cluster", str(cluster.id), str(exc)))
            return None
        return [commit["sha"] for commit in commits if commit.get("sha")]

    def _reconcile_commits(
        self,
        watch: Watch,
        commit_shas: List[str],
        status: VersionStatus,
        merged_at: Optional[datetime],
        report: PullRequestReport,
    ) -> None:
        def step(sha: str) -> CommitStep:
            version = self.matcher.match_by_commit(watch, sha)
            if version is None:
                return CommitStep.CONTINUE
            outcome = self.reconciler.apply_status(watch, version, status, merged_at)
            report.results.append(
                _result(watch, version, status, outcome, "commit", commit_sha=sha)
            )
            if outcome is ReconcileOutcome.SKIPPED_STALE:
                return CommitStep.STOP_WATCH
            return CommitStep.CONTINUE

        fold_commits(commit_shas, step)


def _result(
    watch: Watch,
    version: Version,
    status: VersionStatus,
    outcome: ReconcileOutcome,
    matched_by: MatchedBy,
    commit_sha: Optional[str] = None,
) -> VersionResult:
    return VersionResult(
        watch_id=str(watch.id),
        sequence=version.sequence,
        status=status.value,
        outcome=outcome.value,
        matched_by=matched_by,
        commit_sha=commit_sha,
    )


__all__ = [
    "CommitStep",
    "PullRequestDispatcher",
    "PullRequestReport",
    "UnitFailure",
    "VersionResult",
    "fold_commits",
]
