"""Database entity models - represents the actual structure stored in MongoDB"""

from .base import BaseEntity, InstallationId, PyObjectId
from .cluster import Cluster, GitOpsRef
from .github_installation import GithubInstallation
from .watch import CurrentVersion, TERMINAL_STATUSES, Version, VersionStatus, Watch

__all__ = [
    "BaseEntity",
    "InstallationId",
    "PyObjectId",
    "Cluster",
    "GitOpsRef",
    "GithubInstallation",
    "CurrentVersion",
    "TERMINAL_STATUSES",
    "Version",
    "VersionStatus",
    "Watch",
]
