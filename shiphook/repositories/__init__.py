"""Repository exports for shiphook."""

from .base import BaseRepository, CollectionName
from .cluster_repository import ClusterRepository
from .contracts import ClusterStore, EntityId, InstallationStore, WatchStore
from .github_installation_repository import GithubInstallationRepository
from .watch_repository import VersionRepository, WatchRepository

__all__ = [
    "BaseRepository",
    "CollectionName",
    "ClusterRepository",
    "ClusterStore",
    "EntityId",
    "InstallationStore",
    "WatchStore",
    "GithubInstallationRepository",
    "VersionRepository",
    "WatchRepository",
]
