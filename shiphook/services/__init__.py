from .github_webhook import GithubWebhookService, verify_signature
from .installation_dispatcher import InstallationDispatcher
from .pull_request_dispatcher import (
    CommitStep,
    PullRequestDispatcher,
    PullRequestReport,
    fold_commits,
)
from .status_reconciler import ReconcileOutcome, StatusReconciler, resolve_status
from .version_matcher import VersionMatcher

__all__ = [
    "GithubWebhookService",
    "verify_signature",
    "InstallationDispatcher",
    "CommitStep",
    "PullRequestDispatcher",
    "PullRequestReport",
    "fold_commits",
    "ReconcileOutcome",
    "StatusReconciler",
    "resolve_status",
    "VersionMatcher",
]
