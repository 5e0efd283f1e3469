from __future__ import annotations

import unittest

from gitfinder.activity import DEFAULT_ACTIVITY, describe, event_icon, event_verb
from gitfinder.models import ActivityEvent


class ActivityTests(unittest.TestCase):
    def test_known_event_kinds(self) -> None:
        expected = {
            "PushEvent": ("Pushed to", "push"),
            "PullRequestEvent": ("Opened PR in", "pull_request"),
            "WatchEvent": ("Starred", "star"),
            "CreateEvent": ("Created", "create"),
            "ForkEvent": ("Forked", "fork"),
            "IssuesEvent": ("Opened issue in", "issue"),
        }
        for kind, (verb, icon) in expected.items():
            with self.subTest(kind=kind):
                self.assertEqual(event_verb(kind), verb)
                self.assertEqual(event_icon(kind), icon)

    def test_unknown_kind_falls_back(self) -> None:
        self.assertEqual((event_verb("GollumEvent"), event_icon("GollumEvent")), DEFAULT_ACTIVITY)
        self.assertEqual(event_verb(""), "Interacted with")

    def test_describe(self) -> None:
        event = ActivityEvent(id="1", kind="WatchEvent", repo_name="psf/requests", created_at=None)
        self.assertEqual(describe(event), "Starred psf/requests")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
