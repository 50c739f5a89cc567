"""GitHub App authentication utilities."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import httpx
from jose import jwt
from jose.exceptions import JOSEError

from .config import Settings
from .github_client import API_PREVIEW_HEADERS, DEFAULT_API_URL, GitHubClient
from .github_exceptions import GithubApiError, GithubConfigurationError

logger = logging.getLogger(__name__)

APP_TOKEN_TTL_SECONDS = 60


def normalize_private_key(raw: str) -> str:
    """Expand escaped newlines from env values and ensure a trailing newline."""
    pem = raw.replace("\\n", "\n")
    if not pem.endswith("\n"):
        pem = f"{pem}\n"
    return pem


class GithubAppCredentials:
    """
    Issues GitHub App credentials.

    The app-level JWT is signed with the App's private key, supplied either
    inline or as a path that is re-read on every call. Installation tokens
    are exchanged fresh for every caller; nothing is cached.
    """

    def __init__(
        self,
        app_id: Optional[str],
        private_key: Optional[str] = None,
        private_key_file: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.app_id = app_id
        self._private_key = private_key
        self._private_key_file = private_key_file
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.BaseTransport | None = None
    ) -> "GithubAppCredentials":
        return cls(
            app_id=settings.GITHUB_APP_ID,
            private_key=settings.GITHUB_APP_PRIVATE_KEY,
            private_key_file=settings.GITHUB_APP_PRIVATE_KEY_FILE,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.GITHUB_HTTP_TIMEOUT,
            transport=transport,
        )

    def _load_private_key(self) -> str:
        if self._private_key:
            logger.debug("Using GitHub App private key from configured contents")
            return normalize_private_key(self._private_key)
        if self._private_key_file:
            path = Path(self._private_key_file.strip().strip('"')).expanduser()
            logger.debug(f"Using GitHub App private key from file {path}")
            try:
                return normalize_private_key(path.read_text())
            except OSError as exc:
                raise GithubConfigurationError(
                    f"Could not read GitHub App private key file {path}: {exc.strerror}"
                ) from exc
        raise GithubConfigurationError(
            "GITHUB_APP_PRIVATE_KEY or GITHUB_APP_PRIVATE_KEY_FILE must be configured"
        )

    def issue_app_token(self) -> str:
        """Sign a short-lived RS256 JWT identifying the GitHub App."""
        if not self.app_id:
            raise GithubConfigurationError("GITHUB_APP_ID must be configured")

        now = int(time.time())
        payload = {
            "iat": now,
            "exp": now + APP_TOKEN_TTL_SECONDS,
            "iss": self.app_id,
        }
        pem = self._load_private_key()
        try:
            return jwt.encode(payload, pem, algorithm="RS256")
        except JOSEError as exc:
            raise GithubConfigurationError(
                f"Failed to sign GitHub App token: {exc}"
            ) from exc

    def issue_installation_token(self, installation_id: str) -> Tuple[str, datetime]:
        """Exchange the app JWT for an installation access token."""
        if not installation_id:
            raise GithubConfigurationError(
                "Installation id is required to generate a GitHub App token"
            )

        jwt_token = self.issue_app_token()
        url = f"{self.api_url}/app/installations/{installation_id}/access_tokens"
        headers = {"Authorization": f"Bearer {jwt_token}"}
        headers.update(API_PREVIEW_HEADERS)

        logger.debug(f"Creating installation token for installation {installation_id}")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as http:
                response = http.post(url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GithubApiError(
                f"Installation token exchange failed for {installation_id}: {exc}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise GithubApiError(
                f"Installation token exchange failed for {installation_id}: {exc}"
            ) from exc

        data = response.json()
        token = data.get("token")
        expires_at_raw = data.get("expires_at")
        if not token or not expires_at_raw:
            raise GithubConfigurationError(
                "GitHub installation token response missing token or expires_at"
            )
        expires_at = datetime.fromisoformat(expires_at_raw.replace("Z", "+00:00"))
        return token, expires_at

    def installation_client(self, installation_id: str) -> GitHubClient:
        """REST client authenticated as the given installation."""
        token, _ = self.issue_installation_token(installation_id)
        logger.debug(f"Authenticated as app for installation {installation_id}")
        return GitHubClient(
            token=token,
            api_url=self.api_url,
            timeout=self.timeout,
            transport=self._transport,
        )
