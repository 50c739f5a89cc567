"""Repository for watches and their deployment versions."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.database import Database

from shiphook.models import TERMINAL_STATUSES, Version, VersionStatus, Watch
from shiphook.repositories.base import BaseRepository, CollectionName
from shiphook.repositories.contracts import EntityId, WatchStore

_TERMINAL_VALUES = [status.value for status in TERMINAL_STATUSES]


class VersionRepository(BaseRepository[Version]):
    def __init__(self, db: Database):
        super().__init__(db, CollectionName.WATCH_VERSIONS, Version)


class WatchRepository(BaseRepository[Watch], WatchStore):
    def __init__(self, db: Database):
        super().__init__(db, CollectionName.WATCHES, Watch)
        self.versions = VersionRepository(db)

    def list_for_cluster(self, cluster_id: EntityId) -> List[Watch]:
        return self.find_many(
            {"cluster_id": self._to_object_id(cluster_id)}, sort=[("created_at", 1)]
        )

    def list_pending_versions(self, watch_id: EntityId) -> List[Version]:
        return self.versions.find_many(
            {
                "watch_id": self._to_object_id(watch_id),
                "status": {"$nin": _TERMINAL_VALUES},
            },
            sort=[("sequence", DESCENDING)],
        )

    def list_past_versions(self, watch_id: EntityId) -> List[Version]:
        return self.versions.find_many(
            {
                "watch_id": self._to_object_id(watch_id),
                "status": {"$in": _TERMINAL_VALUES},
            },
            sort=[("sequence", DESCENDING)],
        )

    def get_version_for_commit(
        self, watch_id: EntityId, commit_sha: str
    ) -> Optional[Version]:
        return self.versions.find_one(
            {
                "watch_id": self._to_object_id(watch_id),
                "commit_sha": commit_sha,
                "status": {"$nin": _TERMINAL_VALUES},
            }
        )

    def update_version_status(
        self,
        watch_id: EntityId,
        sequence: int,
        status: VersionStatus,
        merged_at: Optional[datetime] = None,
    ) -> None:
        updates: Dict[str, Any] = {
            "status": VersionStatus(status).value,
            "updated_at": datetime.now(timezone.utc),
        }
        if merged_at is not None:
            updates["merged_at"] = merged_at
        self.versions.collection.update_one(
            {"watch_id": self._to_object_id(watch_id), "sequence": sequence},
            {"$set": updates},
        )

    def set_current_version(
        self, watch_id: EntityId, sequence: int, merged_at: Optional[datetime]
    ) -> bool:
        # Compare-and-set: the filter only matches while no newer version is current
        result = self.collection.update_one(
            {
                "_id": self._to_object_id(watch_id),
                "$or": [
                    {"current_version": None},
                    {"current_version.sequence": {"$lte": sequence}},
                ],
            },
            {
                "$set": {
                    "current_version": {"sequence": sequence, "merged_at": merged_at},
                    "updated_at": datetime.now(timezone.utc),
                }
            },
        )
        return result.matched_count > 0


__all__ = ["VersionRepository", "WatchRepository"]
