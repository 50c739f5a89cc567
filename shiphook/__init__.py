"""GitHub webhook reconciliation for watch deployment versions."""

from .github_auth import GithubAppCredentials
from .github_client import GitHubClient
from .github_exceptions import (
    GithubApiError,
    GithubConfigurationError,
    GithubError,
    GithubRateLimitError,
)
from .logging import DeliveryJSONFormatter, delivery_context, setup_logging
from .mongo import get_client, get_database

__all__ = [
    "GithubAppCredentials",
    "GitHubClient",
    "GithubApiError",
    "GithubConfigurationError",
    "GithubError",
    "GithubRateLimitError",
    "DeliveryJSONFormatter",
    "delivery_context",
    "setup_logging",
    "get_client",
    "get_database",
]
