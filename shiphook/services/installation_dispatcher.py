"""Record GitHub App installations and uninstallations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from shiphook.github_auth import GithubAppCredentials
from shiphook.github_exceptions import GithubApiError, GithubConfigurationError
from shiphook.models import GithubInstallation
from shiphook.models.events import Installation, InstallationEvent
from shiphook.repositories.contracts import InstallationStore

logger = logging.getLogger(__name__)


class InstallationDispatcher:
    def __init__(
        self, installation_store: InstallationStore, credentials: GithubAppCredentials
    ) -> None:
        self.installation_store = installation_store
        self.credentials = credentials

    def handle_installation_event(self, event: InstallationEvent) -> Dict[str, object]:
        installation = event.installation
        installation_id = str(installation.id)

        if event.action == "created":
            record = GithubInstallation(
                installation_id=installation_id,
                account_login=installation.account.login,
                account_type=installation.account.type,
                account_html_url=installation.account.html_url,
                member_count=self._count_members(installation),
                installer_login=event.sender.login,
                installed_at=datetime.now(timezone.utc),
            )
            self.installation_store.create_installation(record)
            logger.info(
                f"Recorded GitHub App installation {installation_id} "
                f"for {installation.account.login}"
            )
            return {
                "status": "processed",
                "action": "installation_created",
                "installation_id": installation_id,
            }

        if event.action == "deleted":
            removed = self.installation_store.delete_installation(installation_id)
            logger.info(
                f"Removed GitHub App installation {installation_id} (found={removed})"
            )
            return {
                "status": "processed",
                "action": "installation_deleted",
                "installation_id": installation_id,
            }

        return {
            "status": "ignored",
            "reason": f"unsupported_installation_action: {event.action}",
        }

    def _count_members(self, installation: Installation) -> Optional[int]:
        if installation.account.type != "Organization":
            return 0
        try:
            with self.credentials.installation_client(str(installation.id)) as gh:
                return len(gh.list_org_members(installation.account.login))
        except GithubConfigurationError as exc:
            logger.error(f"GitHub App is not usable for installation {installation.id}: {exc}")
            raise
        except GithubApiError as exc:
            logger.warning(
                f"Could not list members of {installation.account.login}: {exc}"
            )
            return None


__all__ = ["InstallationDispatcher"]
