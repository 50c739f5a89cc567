"""Repository for GitHub installations (infra layer)."""

from pymongo.database import Database

from shiphook.models import GithubInstallation
from shiphook.repositories.base import BaseRepository, CollectionName
from shiphook.repositories.contracts import InstallationStore


class GithubInstallationRepository(BaseRepository[GithubInstallation], InstallationStore):
    def __init__(self, db: Database):
        super().__init__(db, CollectionName.GITHUB_INSTALLATIONS, GithubInstallation)

    def create_installation(self, installation: GithubInstallation) -> None:
        # Redelivered "created" events overwrite rather than duplicate
        doc = installation.model_dump(by_alias=True, exclude_none=True)
        doc.pop("_id", None)
        created_at = doc.pop("created_at")
        self.collection.update_one(
            {"installation_id": installation.installation_id},
            {"$set": doc, "$setOnInsert": {"created_at": created_at}},
            upsert=True,
        )

    def delete_installation(self, installation_id: str) -> bool:
        result = self.collection.delete_one({"installation_id": installation_id})
        return result.deleted_count > 0


__all__ = ["GithubInstallationRepository"]
