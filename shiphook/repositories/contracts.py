"""Store contracts consumed by the dispatchers.

The dispatchers receive these explicitly; MongoDB implementations live next
to this module and tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Union

from bson import ObjectId

from shiphook.models import Cluster, GithubInstallation, Version, VersionStatus, Watch

EntityId = Union[str, ObjectId]


class ClusterStore(ABC):
    @abstractmethod
    def list_clusters_for_repo(self, owner: str, repo: str) -> List[Cluster]:
        """Clusters bound to the repository directly or through a GitOps ref."""


class WatchStore(ABC):
    @abstractmethod
    def list_for_cluster(self, cluster_id: EntityId) -> List[Watch]: ...

    @abstractmethod
    def list_pending_versions(self, watch_id: EntityId) -> List[Version]: ...

    @abstractmethod
    def list_past_versions(self, watch_id: EntityId) -> List[Version]: ...

    @abstractmethod
    def get_version_for_commit(
        self, watch_id: EntityId, commit_sha: str
    ) -> Optional[Version]:
        """Pending version of the watch built from the given commit."""

    @abstractmethod
    def update_version_status(
        self,
        watch_id: EntityId,
        sequence: int,
        status: VersionStatus,
        merged_at: Optional[datetime] = None,
    ) -> None: ...

    @abstractmethod
    def set_current_version(
        self, watch_id: EntityId, sequence: int, merged_at: Optional[datetime]
    ) -> bool:
        """
        Point the watch at ``sequence`` unless it already has a newer current
        version. Must be atomic per watch. Returns True when written.
        """


class InstallationStore(ABC):
    @abstractmethod
    def create_installation(self, installation: GithubInstallation) -> None: ...

    @abstractmethod
    def delete_installation(self, installation_id: str) -> bool: ...


__all__ = ["ClusterStore", "EntityId", "InstallationStore", "WatchStore"]
