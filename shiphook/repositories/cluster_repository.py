"""Repository for clusters (read-only here)."""

from typing import List

from pymongo.database import Database

from shiphook.models import Cluster
from shiphook.repositories.base import BaseRepository, CollectionName
from shiphook.repositories.contracts import ClusterStore


class ClusterRepository(BaseRepository[Cluster], ClusterStore):
    def __init__(self, db: Database):
        super().__init__(db, CollectionName.CLUSTERS, Cluster)

    def list_clusters_for_repo(self, owner: str, repo: str) -> List[Cluster]:
        return self.find_many(
            {
                "$or": [
                    {"github_owner": owner, "github_repo": repo},
                    {"git_ops_ref.owner": owner, "git_ops_ref.repo": repo},
                ]
            },
            sort=[("created_at", 1)],
        )


__all__ = ["ClusterRepository"]
