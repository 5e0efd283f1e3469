from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Union

from . import github_api
from .config import AppConfig
from .errors import GitFinderError, PartialFailure
from .github_api import GitHubSession
from .models import ActivityEvent, Issue, Profile, Repository, RepositoryStats, RequestState, SortKey
from .stats import ALL_LANGUAGES, derive_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Immutable snapshot of one search. Every update produces a new snapshot."""

    token: int
    handle: str
    state: RequestState = RequestState.IDLE
    profile: Optional[Profile] = None
    repositories: List[Repository] = field(default_factory=list)
    events: List[ActivityEvent] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    readme: Optional[str] = None
    error: Optional[str] = None
    failures: List[str] = field(default_factory=list)
    language: str = ALL_LANGUAGES
    sort_key: SortKey = SortKey.UPDATED
    stats: RepositoryStats = field(default_factory=lambda: derive_stats([]))

    @property
    def loading(self) -> bool:
        return self.state is RequestState.LOADING


class ProfileSearch:
    """Runs profile lookups and holds the state of the latest one.

    Each call to :meth:`search` takes a new token; results that arrive for an
    older token are dropped so a slow response can never overwrite a newer
    search.
    """

    def __init__(self, session: GitHubSession, config: Optional[AppConfig] = None, max_workers: int = 4) -> None:
        self._session = session
        self._config = config or AppConfig()
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._token = 0
        self._result = SearchResult(token=0, handle="")

    @property
    def result(self) -> SearchResult:
        with self._lock:
            return self._result

    def reset(self) -> SearchResult:
        with self._lock:
            self._token += 1
            self._result = SearchResult(token=self._token, handle="")
            return self._result

    def search(self, handle: str) -> SearchResult:
        handle = handle.strip()
        if not handle:
            raise ValueError("A GitHub username is required")

        with self._lock:
            self._token += 1
            token = self._token
            self._result = SearchResult(token=token, handle=handle, state=RequestState.LOADING)
        logger.info("Searching for %s (token %d)", handle, token)

        try:
            profile = github_api.fetch_profile(self._session, handle)
        except GitFinderError as error:
            logger.info("Profile lookup for %s failed: %s", handle, error)
            self._apply(token, state=RequestState.ERROR, error=error.user_message)
            return self.result

        if not self._apply(token, profile=profile):
            return self.result

        self._run_dependent_fetches(token, profile.login)
        with self._lock:
            if self._result.token == token:
                final = RequestState.PARTIAL if self._result.failures else RequestState.SUCCESS
                self._result = replace(self._result, state=final)
            return self._result

    def select(self, language: Optional[str] = None, sort_key: Optional[Union[SortKey, str]] = None) -> SearchResult:
        """Change the repository filter or ordering and re-derive the stats."""
        with self._lock:
            changes: Dict[str, Any] = {}
            if language is not None:
                changes["language"] = language
            if sort_key is not None:
                changes["sort_key"] = SortKey(sort_key)
            self._result = self._updated(self._result, changes)
            return self._result

    def _run_dependent_fetches(self, token: int, login: str) -> None:
        view = self._config.view
        api = self._config.api
        tasks: Dict[str, Callable[[], Any]] = {
            "repositories": lambda: github_api.fetch_repositories(self._session, login, page_size=api.repo_page_size),
        }
        if view.show_activity:
            tasks["events"] = lambda: github_api.fetch_recent_events(self._session, login, limit=api.events_limit)
        if view.show_readme:
            tasks["readme"] = lambda: github_api.fetch_profile_readme(self._session, login)
        if view.show_issues:
            tasks["issues"] = lambda: github_api.search_open_issues(self._session, login, limit=api.issues_limit)

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="gitfinder") as executor:
            futures = {executor.submit(task): name for name, task in tasks.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    value = future.result()
                except PartialFailure as error:
                    logger.warning("Could not load %s for %s: %s", error.resource, login, error)
                    self._record_failure(token, name)
                    continue
                self._apply(token, **{name: value})

    def _record_failure(self, token: int, name: str) -> None:
        with self._lock:
            if self._result.token != token:
                return
            self._result = replace(self._result, failures=[*self._result.failures, name])

    def _apply(self, token: int, **changes: Any) -> bool:
        with self._lock:
            if self._result.token != token:
                logger.debug("Discarding stale %s for token %d", ", ".join(changes), token)
                return False
            self._result = self._updated(self._result, changes)
            return True

    @staticmethod
    def _updated(result: SearchResult, changes: Dict[str, Any]) -> SearchResult:
        updated = replace(result, **changes)
        if {"repositories", "language", "sort_key"} & changes.keys():
            updated = replace(
                updated,
                stats=derive_stats(updated.repositories, updated.language, updated.sort_key),
            )
        return updated
