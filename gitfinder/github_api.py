from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests import Response
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import ApiConfig
from .errors import NotFound, PartialFailure, TransientError
from .models import ActivityEvent, Issue, Profile, Repository

logger = logging.getLogger(__name__)

_USER_AGENT = "gitfinder/0.1"
_RAW_MEDIA_TYPE = "application/vnd.github.raw+json"
MAX_PAGE_SIZE = 100
MAX_EVENTS = 10
MAX_ISSUES = 5


@dataclass(slots=True)
class GitHubSession:
    http: requests.Session
    settings: ApiConfig

    @classmethod
    def create(cls, settings: Optional[ApiConfig] = None) -> "GitHubSession":
        session = requests.Session()
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": _USER_AGENT,
        }
        token = os.getenv("GITHUB_TOKEN")
        if token:
            headers["Authorization"] = f"Bearer {token}"
        session.headers.update(headers)
        return cls(http=session, settings=settings or ApiConfig())

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GitHubSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _error_message(response: Response) -> str:
    if response.headers.get("Content-Type", "").startswith("application/json"):
        try:
            return str(response.json().get("message", ""))
        except ValueError:
            pass
    return response.text[:200]


def _send(
    session: GitHubSession,
    path: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    url = f"{session.settings.base_url}{path}"
    logger.debug("GET %s params=%s", url, params)
    try:
        response = session.http.get(url, params=params, headers=headers, timeout=session.settings.timeout)
    except requests.RequestException as error:
        raise TransientError(f"GitHub API request to {path} failed: {error}") from error
    if response.status_code == 404:
        raise NotFound(f"GitHub API returned 404 for {path}", status=404)
    if response.status_code >= 400:
        raise TransientError(
            f"GitHub API request failed: {response.status_code} {_error_message(response)}",
            status=response.status_code,
        )
    return response


def _get(
    session: GitHubSession,
    path: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    retrying = Retrying(
        stop=stop_after_attempt(session.settings.max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    return retrying(_send, session, path, params, headers)


def _json(response: Response, path: str) -> Any:
    try:
        return response.json()
    except ValueError as error:
        raise TransientError(f"GitHub API returned an undecodable body for {path}") from error


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring malformed timestamp %r", value)
        return None


def _require_handle(handle: str) -> str:
    cleaned = handle.strip()
    if not cleaned:
        raise ValueError("A GitHub username is required")
    return cleaned


def fetch_profile(session: GitHubSession, handle: str) -> Profile:
    handle = _require_handle(handle)
    path = f"/users/{handle}"
    try:
        payload = _json(_get(session, path), path)
    except NotFound as error:
        raise NotFound(f"GitHub user {handle!r} does not exist", handle=handle, status=404) from error
    except TransientError as error:
        raise TransientError(str(error), handle=handle, status=error.status) from error
    if not isinstance(payload, dict):
        raise TransientError(f"Unexpected profile payload for {handle!r}", handle=handle)
    return parse_profile(payload)


def fetch_repositories(
    session: GitHubSession,
    handle: str,
    page_size: int = MAX_PAGE_SIZE,
    sort: str = "updated",
    direction: str = "desc",
) -> List[Repository]:
    handle = _require_handle(handle)
    path = f"/users/{handle}/repos"
    params = {
        "per_page": str(max(1, min(page_size, MAX_PAGE_SIZE))),
        "sort": sort,
        "direction": direction,
    }
    try:
        payload = _json(_get(session, path, params=params), path)
    except (NotFound, TransientError) as error:
        raise PartialFailure(str(error), resource="repositories", handle=handle, status=error.status) from error
    return [parse_repository(item) for item in payload or []]


def fetch_recent_events(session: GitHubSession, handle: str, limit: int = MAX_EVENTS) -> List[ActivityEvent]:
    handle = _require_handle(handle)
    limit = max(1, min(limit, MAX_EVENTS))
    path = f"/users/{handle}/events/public"
    try:
        payload = _json(_get(session, path, params={"per_page": str(limit)}), path)
    except (NotFound, TransientError) as error:
        logger.warning("Could not load public events for %s: %s", handle, error)
        return []
    return [parse_event(item) for item in (payload or [])[:limit]]


def fetch_profile_readme(session: GitHubSession, handle: str) -> Optional[str]:
    handle = _require_handle(handle)
    path = f"/repos/{handle}/{handle}/readme"
    try:
        response = _get(session, path, headers={"Accept": _RAW_MEDIA_TYPE})
    except NotFound:
        logger.debug("No profile README for %s", handle)
        return None
    except TransientError as error:
        logger.warning("Could not load profile README for %s: %s", handle, error)
        return None
    text = response.text
    return text if text.strip() else None


def search_open_issues(session: GitHubSession, handle: str, limit: int = MAX_ISSUES) -> List[Issue]:
    handle = _require_handle(handle)
    limit = max(1, min(limit, MAX_ISSUES))
    path = "/search/issues"
    params = {"q": f"author:{handle} type:issue state:open", "per_page": str(limit)}
    try:
        payload = _json(_get(session, path, params=params), path)
    except (NotFound, TransientError) as error:
        logger.warning("Could not search open issues for %s: %s", handle, error)
        return []
    items = payload.get("items", []) if isinstance(payload, dict) else []
    return [parse_issue(item) for item in items[:limit]]


def parse_profile(payload: Dict[str, Any]) -> Profile:
    return Profile(
        login=str(payload.get("login", "")),
        name=payload.get("name"),
        avatar_url=str(payload.get("avatar_url", "")),
        html_url=str(payload.get("html_url", "")),
        bio=payload.get("bio"),
        location=payload.get("location"),
        company=payload.get("company"),
        blog=payload.get("blog") or None,
        twitter_username=payload.get("twitter_username"),
        followers=int(payload.get("followers", 0)),
        following=int(payload.get("following", 0)),
        public_repos=int(payload.get("public_repos", 0)),
        public_gists=int(payload.get("public_gists", 0)),
        created_at=_parse_timestamp(payload.get("created_at")),
    )


def parse_repository(payload: Dict[str, Any]) -> Repository:
    return Repository(
        id=int(payload.get("id", 0)),
        name=str(payload.get("name", "")),
        full_name=str(payload.get("full_name", "")),
        description=payload.get("description"),
        html_url=str(payload.get("html_url", "")),
        stars=int(payload.get("stargazers_count", 0)),
        forks=int(payload.get("forks_count", 0)),
        language=payload.get("language") or None,
        updated_at=_parse_timestamp(payload.get("updated_at")),
        topics=list(payload.get("topics") or []),
    )


def parse_event(payload: Dict[str, Any]) -> ActivityEvent:
    return ActivityEvent(
        id=str(payload.get("id", "")),
        kind=str(payload.get("type", "")),
        repo_name=str((payload.get("repo") or {}).get("name", "")),
        created_at=_parse_timestamp(payload.get("created_at")),
        payload=dict(payload.get("payload") or {}),
    )


def parse_issue(payload: Dict[str, Any]) -> Issue:
    return Issue(
        id=int(payload.get("id", 0)),
        number=int(payload.get("number", 0)),
        title=str(payload.get("title", "")),
        html_url=str(payload.get("html_url", "")),
        repository_url=str(payload.get("repository_url", "")),
        state=str(payload.get("state", "open")),
        created_at=_parse_timestamp(payload.get("created_at")),
        comments=int(payload.get("comments", 0)),
    )
