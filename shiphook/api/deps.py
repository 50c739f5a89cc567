"""Dependency wiring for API endpoints."""

from typing import Optional

from fastapi import Depends
from pymongo.database import Database
from redis import Redis

from shiphook.config import Settings, get_settings
from shiphook.github_auth import GithubAppCredentials
from shiphook.mongo import get_database
from shiphook.redis import get_redis
from shiphook.repositories import (
    ClusterRepository,
    GithubInstallationRepository,
    WatchRepository,
)
from shiphook.services import (
    GithubWebhookService,
    InstallationDispatcher,
    PullRequestDispatcher,
)


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return get_database(settings.MONGODB_URI, settings.MONGODB_DB_NAME)


def get_redis_client(settings: Settings = Depends(get_settings)) -> Optional[Redis]:
    return get_redis(settings)


def get_webhook_service(
    settings: Settings = Depends(get_settings),
    db: Database = Depends(get_db),
    redis_client: Optional[Redis] = Depends(get_redis_client),
) -> GithubWebhookService:
    credentials = GithubAppCredentials.from_settings(settings)
    return GithubWebhookService(
        pull_requests=PullRequestDispatcher(
            cluster_store=ClusterRepository(db),
            watch_store=WatchRepository(db),
            credentials=credentials,
            redis_client=redis_client,
            lock_timeout=settings.WATCH_LOCK_TIMEOUT,
        ),
        installations=InstallationDispatcher(
            installation_store=GithubInstallationRepository(db),
            credentials=credentials,
        ),
    )


__all__ = ["get_db", "get_redis_client", "get_webhook_service"]
