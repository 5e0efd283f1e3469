"""Derived views over a fetched repository list.

Everything here is pure: inputs are never mutated and the same inputs always
produce the same output. Ties are resolved by the incoming (API) order, which
``sorted`` guarantees because it is stable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Sequence, Union

from .models import NO_LANGUAGE, LanguageShare, Repository, RepositoryStats, SortKey

ALL_LANGUAGES = "all"
TOP_LANGUAGE_LIMIT = 5

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def language_counts(repositories: Sequence[Repository]) -> Dict[str, int]:
    """Count repositories per declared language, most common first.

    Languages with equal counts keep the order in which they first appear.
    """
    counts: Dict[str, int] = {}
    for repo in repositories:
        if repo.language:
            counts[repo.language] = counts.get(repo.language, 0) + 1
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return dict(ordered)


def top_languages(repositories: Sequence[Repository], limit: int = TOP_LANGUAGE_LIMIT) -> List[LanguageShare]:
    """Return the leading languages with their share of *all* repositories.

    The denominator is the full repository count, including repositories that
    declare no language, so the shares may add up to less than 100.
    """
    return language_shares(language_counts(repositories), len(repositories), limit)


def language_shares(counts: Dict[str, int], total: int, limit: int = TOP_LANGUAGE_LIMIT) -> List[LanguageShare]:
    if not total:
        return []
    return [
        LanguageShare(language=language, count=count, percentage=count / total * 100)
        for language, count in list(counts.items())[:limit]
    ]


def filter_repositories(repositories: Sequence[Repository], language: str = ALL_LANGUAGES) -> List[Repository]:
    if language == ALL_LANGUAGES:
        return list(repositories)
    return [repo for repo in repositories if repo.language == language]


def sort_repositories(repositories: Sequence[Repository], key: Union[SortKey, str] = SortKey.UPDATED) -> List[Repository]:
    try:
        sort_key = SortKey(key)
    except ValueError:
        raise ValueError(f"Unknown sort key {key!r}; expected one of {', '.join(k.value for k in SortKey)}") from None
    if sort_key is SortKey.STARS:
        return sorted(repositories, key=lambda repo: repo.stars, reverse=True)
    if sort_key is SortKey.FORKS:
        return sorted(repositories, key=lambda repo: repo.forks, reverse=True)
    return sorted(repositories, key=_updated_key, reverse=True)


def _updated_key(repo: Repository) -> datetime:
    if repo.updated_at is None:
        return _OLDEST
    if repo.updated_at.tzinfo is None:
        return repo.updated_at.replace(tzinfo=timezone.utc)
    return repo.updated_at


def total_stars(repositories: Sequence[Repository]) -> int:
    return sum(repo.stars for repo in repositories)


def dominant_language(shares: Sequence[LanguageShare]) -> str:
    return shares[0].language if shares else NO_LANGUAGE


def available_languages(repositories: Sequence[Repository]) -> List[str]:
    return language_choices(language_counts(repositories))


def language_choices(counts: Dict[str, int]) -> List[str]:
    return [ALL_LANGUAGES, *counts]


def derive_stats(
    repositories: Sequence[Repository],
    language: str = ALL_LANGUAGES,
    sort_key: Union[SortKey, str] = SortKey.UPDATED,
) -> RepositoryStats:
    """Compute everything the repository section shows for one selection."""
    counts = language_counts(repositories)
    shares = language_shares(counts, len(repositories))
    view = sort_repositories(filter_repositories(repositories, language), sort_key)
    return RepositoryStats(
        language_counts=counts,
        top_languages=shares,
        total_stars=total_stars(repositories),
        dominant_language=dominant_language(shares),
        repositories=view,
        available_languages=language_choices(counts),
    )
