from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


NO_LANGUAGE = "none"


class SortKey(str, Enum):
    UPDATED = "updated"
    STARS = "stars"
    FORKS = "forks"


class RequestState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Profile:
    login: str
    name: Optional[str]
    avatar_url: str
    html_url: str
    bio: Optional[str]
    location: Optional[str]
    company: Optional[str]
    blog: Optional[str]
    twitter_username: Optional[str]
    followers: int
    following: int
    public_repos: int
    public_gists: int
    created_at: Optional[datetime]

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True, slots=True)
class Repository:
    id: int
    name: str
    full_name: str
    description: Optional[str]
    html_url: str
    stars: int
    forks: int
    language: Optional[str]
    updated_at: Optional[datetime]
    topics: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ActivityEvent:
    id: str
    kind: str
    repo_name: str
    created_at: Optional[datetime]
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Issue:
    id: int
    number: int
    title: str
    html_url: str
    repository_url: str
    state: str
    created_at: Optional[datetime]
    comments: int = 0

    @property
    def repo_name(self) -> str:
        # https://api.github.com/repos/<owner>/<repo>
        parts = self.repository_url.rstrip("/").split("/")
        return "/".join(parts[-2:]) if len(parts) >= 2 else self.repository_url


@dataclass(frozen=True, slots=True)
class LanguageShare:
    language: str
    count: int
    percentage: float

    @property
    def display_percentage(self) -> int:
        # halves round up: 12.5 -> 13
        return math.floor(self.percentage + 0.5)


@dataclass(frozen=True, slots=True)
class RepositoryStats:
    language_counts: Dict[str, int]
    top_languages: List[LanguageShare]
    total_stars: int
    dominant_language: str
    repositories: List[Repository]
    available_languages: List[str]
