"""Lightweight GitHub REST client with pagination and rate-limit handling."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import httpx

from .github_exceptions import (
    GithubApiError,
    GithubConfigurationError,
    GithubRateLimitError,
)

API_PREVIEW_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}

DEFAULT_API_URL = "https://api.github.com"


def next_page_url(link_header: Optional[str]) -> Optional[str]:
    """Return the rel="next" target of a GitHub Link header, if any."""
    if not link_header:
        return None
    for part in link_header.split(","):
        segment = part.strip()
        if segment.endswith('rel="next"'):
            return segment[segment.find("<") + 1 : segment.find(">")]
    return None


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise GithubConfigurationError("GitHub token is required to call the API")
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._rest = httpx.Client(
            base_url=self._api_url,
            timeout=timeout,
            transport=transport or httpx.HTTPTransport(retries=3),
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self._token}"}
        headers.update(API_PREVIEW_HEADERS)
        return headers

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        if response.status_code in (403, 429) and "rate limit" in response.text.lower():
            self._handle_rate_limit(response)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GithubApiError(str(exc), status_code=response.status_code) from exc
        return response

    def _handle_rate_limit(self, response: httpx.Response) -> None:
        reset_header = response.headers.get("X-RateLimit-Reset")
        retry_after_header = response.headers.get("Retry-After")
        wait_seconds = 60.0

        if retry_after_header:
            try:
                wait_seconds = float(retry_after_header)
            except ValueError:
                pass
        elif reset_header:
            try:
                reset_epoch = float(reset_header)
                now_epoch = datetime.now(timezone.utc).timestamp()
                wait_seconds = max(reset_epoch - now_epoch, 1.0)
            except ValueError:
                pass

        raise GithubRateLimitError("GitHub rate limit reached", retry_after=wait_seconds)

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = self._rest.get(url, headers=self._headers(), params=params)
        except httpx.RequestError as exc:
            raise GithubApiError(f"GitHub request to {url} failed: {exc}") from exc
        return self._handle_response(response)

    def _paginate(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Iterator[Dict[str, Any]]:
        url: Optional[str] = path
        query = params or {}
        while url:
            response = self._get(url, params=query)
            items = response.json()
            if isinstance(items, list):
                yield from items
            else:
                yield items
                break
            url = next_page_url(response.headers.get("Link"))
            # The next link already carries the query string
            query = None

    def list_pull_request_commits(
        self, owner: str, repo: str, number: int
    ) -> List[Dict[str, Any]]:
        """Commits on a pull request, oldest first as GitHub returns them."""
        return list(
            self._paginate(
                f"/repos/{owner}/{repo}/pulls/{number}/commits",
                params={"per_page": 100},
            )
        )

    def list_org_members(self, org: str) -> List[Dict[str, Any]]:
        return list(self._paginate(f"/orgs/{org}/members", params={"per_page": 100}))

    def close(self) -> None:
        self._rest.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
