"""GitHub installation entity - tracks GitHub App installations"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import Field

from .base import BaseEntity, InstallationId


class GithubInstallation(BaseEntity):
    installation_id: InstallationId
    account_login: str
    account_type: str  # "User" or "Organization"
    account_html_url: Optional[str] = None
    # None when the organization member lookup failed upstream
    member_count: Optional[int] = None
    installer_login: Optional[str] = None
    installed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
