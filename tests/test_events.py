import unittest

from fakes import installation_payload, pull_request_payload
from shiphook.models.events import (
    IgnoredEvent,
    InstallationEvent,
    InvalidPayloadError,
    PullRequestEvent,
    parse_event,
)


class TestParseEvent(unittest.TestCase):
    def test_pull_request(self):
        event = parse_event(
            "pull_request",
            pull_request_payload(merged=True, merged_at="2024-05-01T12:00:00Z"),
        )

        self.assertIsInstance(event, PullRequestEvent)
        self.assertEqual(event.repo_owner, "acme")
        self.assertEqual(event.repo_name, "deployments")
        self.assertTrue(event.pull_request.merged)
        self.assertEqual(event.effective_merged_at.year, 2024)

    def test_top_level_merged_at_fallback(self):
        payload = pull_request_payload(merged=True)
        payload["merged_at"] = "2023-01-02T03:04:05Z"

        event = parse_event("pull_request", payload)

        self.assertEqual(event.effective_merged_at.year, 2023)

    def test_installation(self):
        event = parse_event("installation", installation_payload())

        self.assertIsInstance(event, InstallationEvent)
        self.assertEqual(event.installation.id, 4242)
        self.assertEqual(event.installation.account.type, "Organization")

    def test_explicitly_ignored_types(self):
        for event_type in (
            "installation_repositories",
            "integration_installation",
            "integration_installation_repositories",
        ):
            event = parse_event(event_type, {"action": "added"})
            self.assertIsInstance(event, IgnoredEvent)
            self.assertEqual(event.reason, "event_ignored")

    def test_unknown_types(self):
        for event_type in ("push", None, ""):
            event = parse_event(event_type, {})
            self.assertIsInstance(event, IgnoredEvent)
            self.assertEqual(event.reason, "event_not_handled")

    def test_body_not_matching_header_is_rejected(self):
        with self.assertRaises(InvalidPayloadError) as ctx:
            parse_event("pull_request", installation_payload())
        self.assertEqual(ctx.exception.event_type, "pull_request")
        self.assertTrue(ctx.exception.errors)

        with self.assertRaises(InvalidPayloadError):
            parse_event("installation", pull_request_payload())

    def test_body_cannot_choose_its_variant(self):
        payload = pull_request_payload()
        payload["kind"] = "installation"

        event = parse_event("pull_request", payload)

        self.assertEqual(event.kind, "pull_request")


if __name__ == "__main__":
    unittest.main()
