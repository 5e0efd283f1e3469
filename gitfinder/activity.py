from __future__ import annotations

from typing import Dict, Tuple

from .models import ActivityEvent

DEFAULT_ACTIVITY: Tuple[str, str] = ("Interacted with", "activity")

_EVENT_LABELS: Dict[str, Tuple[str, str]] = {
    "PushEvent": ("Pushed to", "push"),
    "PullRequestEvent": ("Opened PR in", "pull_request"),
    "WatchEvent": ("Starred", "star"),
    "CreateEvent": ("Created", "create"),
    "ForkEvent": ("Forked", "fork"),
    "IssuesEvent": ("Opened issue in", "issue"),
}


def event_verb(kind: str) -> str:
    return _EVENT_LABELS.get(kind, DEFAULT_ACTIVITY)[0]


def event_icon(kind: str) -> str:
    return _EVENT_LABELS.get(kind, DEFAULT_ACTIVITY)[1]


def describe(event: ActivityEvent) -> str:
    """Human readable one-liner, e.g. ``Pushed to octocat/Hello-World``."""
    return f"{event_verb(event.kind)} {event.repo_name}".strip()
