import time
import unittest

import httpx

from shiphook.github_client import GitHubClient, next_page_url
from shiphook.github_exceptions import (
    GithubApiError,
    GithubConfigurationError,
    GithubRateLimitError,
)


class TestNextPageUrl(unittest.TestCase):
    def test_parses_next_link(self):
        header = (
            '<https://api.github.com/repositories/1/pulls/2/commits?page=2>; rel="next", '
            '<https://api.github.com/repositories/1/pulls/2/commits?page=5>; rel="last"'
        )
        self.assertEqual(
            next_page_url(header),
            "https://api.github.com/repositories/1/pulls/2/commits?page=2",
        )

    def test_no_next_link(self):
        self.assertIsNone(next_page_url(None))
        self.assertIsNone(next_page_url('<https://x?page=1>; rel="prev"'))


class TestGitHubClient(unittest.TestCase):
    def setUp(self):
        self.requests = []

    def _client(self, handler):
        def recording_handler(request):
            self.requests.append(request)
            return handler(request)

        return GitHubClient(token="ghs_abc", transport=httpx.MockTransport(recording_handler))

    def test_requires_token(self):
        with self.assertRaises(GithubConfigurationError):
            GitHubClient(token="")

    def test_pull_request_commits_follow_pagination(self):
        def handler(request):
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{"sha": "c3"}])
            return httpx.Response(
                200,
                json=[{"sha": "c1"}, {"sha": "c2"}],
                headers={
                    "Link": '<https://api.github.com/repos/acme/deployments/pulls/42/commits?per_page=100&page=2>; rel="next"'
                },
            )

        with self._client(handler) as gh:
            commits = gh.list_pull_request_commits("acme", "deployments", 42)

        self.assertEqual([c["sha"] for c in commits], ["c1", "c2", "c3"])
        self.assertEqual(len(self.requests), 2)
        self.assertEqual(self.requests[0].url.path, "/repos/acme/deployments/pulls/42/commits")
        self.assertEqual(self.requests[0].url.params["per_page"], "100")
        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer ghs_abc")
        self.assertEqual(
            self.requests[0].headers["Accept"], "application/vnd.github+json"
        )

    def test_org_members(self):
        client = self._client(
            lambda request: httpx.Response(200, json=[{"login": "a"}, {"login": "b"}])
        )

        members = client.list_org_members("acme")

        self.assertEqual(len(members), 2)
        self.assertEqual(self.requests[0].url.path, "/orgs/acme/members")

    def test_rate_limit(self):
        client = self._client(
            lambda request: httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={"X-RateLimit-Reset": str(int(time.time()) + 30)},
            )
        )

        with self.assertRaises(GithubRateLimitError) as ctx:
            client.list_org_members("acme")
        self.assertGreater(ctx.exception.retry_after, 0)

    def test_retry_after_header(self):
        client = self._client(
            lambda request: httpx.Response(
                429,
                json={"message": "secondary rate limit"},
                headers={"Retry-After": "12"},
            )
        )

        with self.assertRaises(GithubRateLimitError) as ctx:
            client.list_org_members("acme")
        self.assertEqual(ctx.exception.retry_after, 12.0)

    def test_http_error_is_api_error(self):
        client = self._client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

        with self.assertRaises(GithubApiError) as ctx:
            client.list_pull_request_commits("acme", "deployments", 42)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_transport_error_is_api_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with self.assertRaises(GithubApiError):
            self._client(handler).list_org_members("acme")


if __name__ == "__main__":
    unittest.main()
