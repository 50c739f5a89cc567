import asyncio
import hashlib
import hmac
import json
import threading
import unittest
from unittest.mock import MagicMock

import httpx
from fastapi.testclient import TestClient

from fakes import (
    InMemoryClusterStore,
    InMemoryInstallationStore,
    InMemoryWatchStore,
    installation_payload,
    make_cluster,
    make_version,
    make_watch,
    pull_request_payload,
)
from shiphook.api.deps import get_webhook_service
from shiphook.config import Settings, get_settings
from shiphook.main import create_app
from shiphook.models import VersionStatus
from shiphook.services import (
    GithubWebhookService,
    InstallationDispatcher,
    PullRequestDispatcher,
)

HOOK_URL = "/api/v1/hooks/github"


class TestGithubWebhookApi(unittest.TestCase):
    def setUp(self):
        self.cluster = make_cluster(installation_id=None)
        self.watches = InMemoryWatchStore()
        self.watch = self.watches.add_watch(make_watch(self.cluster))
        self.installations = InMemoryInstallationStore()
        self.credentials = MagicMock()
        self.service = GithubWebhookService(
            pull_requests=PullRequestDispatcher(
                InMemoryClusterStore([self.cluster]), self.watches, self.credentials
            ),
            installations=InstallationDispatcher(self.installations, self.credentials),
        )
        self.settings = Settings(GITHUB_WEBHOOK_SECRET=None)

        app = create_app()
        app.dependency_overrides[get_webhook_service] = lambda: self.service
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def _post(self, event_type, payload, headers=None):
        all_headers = {"X-GitHub-Event": event_type, "Content-Type": "application/json"}
        all_headers.update(headers or {})
        return self.client.post(HOOK_URL, content=json.dumps(payload), headers=all_headers)

    def test_pull_request_event_is_processed(self):
        self.watches.add_version(make_version(self.watch, 1, pull_request_number=42))

        response = self._post("pull_request", pull_request_payload(action="opened"))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "processed")
        self.assertEqual(body["results"][0]["outcome"], "no_op")
        self.assertIn("X-Request-ID", response.headers)
        self.assertEqual(
            self.watches.stored_version(self.watch.id, 1).status, VersionStatus.OPENED
        )

    def test_ignored_pull_request_action(self):
        response = self._post("pull_request", pull_request_payload(action="labeled"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ignored")

    def test_installation_event(self):
        response = self._post(
            "installation", installation_payload(account_type="User", login="octocat")
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["action"], "installation_created")
        self.assertIn("4242", self.installations.installations)

    def test_ignored_and_unknown_event_types_are_acknowledged(self):
        for event_type in ("installation_repositories", "integration_installation", "push"):
            response = self._post(event_type, {"action": "added"})
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["status"], "ignored")

    def test_invalid_payload_is_acknowledged_and_ignored(self):
        response = self._post("pull_request", {"action": "opened"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reason"], "invalid_payload")

    def test_invalid_json_is_acknowledged(self):
        response = self.client.post(
            HOOK_URL, content=b"{not json", headers={"X-GitHub-Event": "pull_request"}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reason"], "invalid_json")

    def test_dispatch_failure_is_still_acknowledged(self):
        self.service.pull_requests.cluster_store = MagicMock()
        self.service.pull_requests.cluster_store.list_clusters_for_repo.side_effect = (
            RuntimeError("mongo down")
        )

        with self.assertLogs("shiphook.services.github_webhook", "ERROR"):
            response = self._post("pull_request", pull_request_payload(action="opened"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["error"], "dispatch_failed")

    def test_signature_is_verified_when_secret_configured(self):
        self.settings = Settings(GITHUB_WEBHOOK_SECRET="s3cret")
        body = json.dumps(pull_request_payload(action="labeled")).encode()
        digest = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

        ok = self.client.post(
            HOOK_URL,
            content=body,
            headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": f"sha256={digest}"},
        )
        bad = self.client.post(
            HOOK_URL,
            content=body,
            headers={"X-GitHub-Event": "pull_request", "X-Hub-Signature-256": "sha256=00"},
        )
        missing = self.client.post(
            HOOK_URL, content=body, headers={"X-GitHub-Event": "pull_request"}
        )

        self.assertEqual(ok.status_code, 200)
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(missing.status_code, 401)

    def test_healthz(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.json(), {"status": "ok"})


class _BlockingService:
    """Holds a delivery inside dispatch until the test releases it."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.released_in_time = None

    def handle_github_event(self, event_type, payload):
        self.entered.set()
        self.released_in_time = self.release.wait(5)
        return {"status": "processed"}


class TestWebhookDispatchOffEventLoop(unittest.IsolatedAsyncioTestCase):
    async def test_slow_dispatch_does_not_block_other_requests(self):
        service = _BlockingService()
        app = create_app()
        app.dependency_overrides[get_webhook_service] = lambda: service
        app.dependency_overrides[get_settings] = lambda: Settings(GITHUB_WEBHOOK_SECRET=None)

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            hook = asyncio.create_task(
                client.post(
                    HOOK_URL,
                    content=json.dumps(pull_request_payload(action="opened")),
                    headers={"X-GitHub-Event": "pull_request"},
                )
            )
            for _ in range(200):
                if service.entered.is_set():
                    break
                await asyncio.sleep(0.01)

            health = await asyncio.wait_for(client.get("/healthz"), timeout=2)
            service.release.set()
            hook_response = await hook

        self.assertEqual(health.status_code, 200)
        self.assertTrue(service.entered.is_set())
        self.assertTrue(service.released_in_time)
        self.assertEqual(hook_response.json(), {"status": "processed"})


if __name__ == "__main__":
    unittest.main()
