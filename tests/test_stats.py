from __future__ import annotations

import unittest
from datetime import datetime, timezone
from typing import Optional
from unittest import mock

from gitfinder import stats
from gitfinder.models import NO_LANGUAGE, Repository, SortKey
from gitfinder.stats import (
    ALL_LANGUAGES,
    available_languages,
    derive_stats,
    dominant_language,
    filter_repositories,
    language_counts,
    sort_repositories,
    top_languages,
    total_stars,
)


def _repo(
    name: str,
    language: Optional[str] = None,
    stars: int = 0,
    forks: int = 0,
    updated: Optional[str] = "2024-01-01",
) -> Repository:
    updated_at = datetime.fromisoformat(updated).replace(tzinfo=timezone.utc) if updated else None
    return Repository(
        id=hash(name) & 0xFFFF,
        name=name,
        full_name=f"octocat/{name}",
        description=None,
        html_url=f"https://github.com/octocat/{name}",
        stars=stars,
        forks=forks,
        language=language,
        updated_at=updated_at,
    )


class LanguageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repos = [
            _repo("a", "Python"),
            _repo("b", "Go"),
            _repo("c", None),
            _repo("d", "Go"),
            _repo("e", "Rust"),
            _repo("f", "Python"),
            _repo("g", "Go"),
            _repo("h", None),
        ]

    def test_counts_skip_repositories_without_language(self) -> None:
        counts = language_counts(self.repos)
        self.assertEqual(counts, {"Go": 3, "Python": 2, "Rust": 1})
        self.assertEqual(sum(counts.values()), len([repo for repo in self.repos if repo.language]))

    def test_equal_counts_keep_first_appearance_order(self) -> None:
        repos = [_repo("a", "Ruby"), _repo("b", "C"), _repo("c", "C"), _repo("d", "Ruby"), _repo("e", "Zig")]
        self.assertEqual(list(language_counts(repos)), ["Ruby", "C", "Zig"])

    def test_top_languages_use_full_repository_count(self) -> None:
        shares = top_languages(self.repos)
        self.assertEqual([share.language for share in shares], ["Go", "Python", "Rust"])
        self.assertAlmostEqual(shares[0].percentage, 37.5)
        self.assertEqual(shares[0].display_percentage, 38)
        self.assertEqual(shares[2].display_percentage, 13)
        self.assertTrue(all(share.percentage >= 0 for share in shares))
        self.assertLessEqual(sum(share.percentage for share in shares), 100)

    def test_display_percentage_rounds_halves_up(self) -> None:
        one_of_eight = [_repo("go", "Go")] + [_repo(f"x{i}") for i in range(7)]
        three_of_eight = [_repo(f"go{i}", "Go") for i in range(3)] + [_repo(f"x{i}") for i in range(5)]
        self.assertEqual(top_languages(one_of_eight)[0].display_percentage, 13)
        self.assertEqual(top_languages(three_of_eight)[0].display_percentage, 38)
        self.assertEqual(top_languages([_repo("a", "Go"), _repo("b"), _repo("c")])[0].display_percentage, 33)

    def test_top_languages_limited_to_five(self) -> None:
        repos = [_repo(str(index), f"Lang{index}") for index in range(8)]
        self.assertEqual(len(top_languages(repos)), 5)

    def test_top_languages_of_empty_list(self) -> None:
        self.assertEqual(top_languages([]), [])

    def test_dominant_language(self) -> None:
        repos = [_repo(f"go{i}", "Go") for i in range(3)] + [_repo(f"rs{i}", "Rust") for i in range(5)]
        self.assertEqual(dominant_language(top_languages(repos)), "Rust")
        self.assertEqual(dominant_language(top_languages([_repo("x")])), NO_LANGUAGE)

    def test_available_languages(self) -> None:
        self.assertEqual(available_languages(self.repos), [ALL_LANGUAGES, "Go", "Python", "Rust"])


class FilterSortTests(unittest.TestCase):
    def test_filter_is_exact_and_case_sensitive(self) -> None:
        repos = [_repo("a", "Python"), _repo("b", "python"), _repo("c", None)]
        self.assertEqual([repo.name for repo in filter_repositories(repos, "Python")], ["a"])
        self.assertEqual(filter_repositories(repos, "Haskell"), [])

    def test_filter_all_returns_everything(self) -> None:
        repos = [_repo("a", "Python"), _repo("b", None)]
        filtered = filter_repositories(repos, ALL_LANGUAGES)
        self.assertEqual(filtered, repos)
        self.assertIsNot(filtered, repos)

    def test_sort_by_stars(self) -> None:
        repos = [_repo("five", stars=5), _repo("twenty", stars=20), _repo("one", stars=1)]
        self.assertEqual([repo.stars for repo in sort_repositories(repos, SortKey.STARS)], [20, 5, 1])

    def test_sort_by_forks_is_stable(self) -> None:
        repos = [_repo("a", forks=2), _repo("b", forks=7), _repo("c", forks=2)]
        self.assertEqual([repo.name for repo in sort_repositories(repos, "forks")], ["b", "a", "c"])

    def test_sort_by_updated(self) -> None:
        repos = [_repo("old", updated="2023-01-01"), _repo("new", updated="2024-06-01"), _repo("never", updated=None)]
        self.assertEqual([repo.name for repo in sort_repositories(repos)], ["new", "old", "never"])

    def test_sort_does_not_mutate_input(self) -> None:
        repos = [_repo("a", stars=1), _repo("b", stars=2)]
        sort_repositories(repos, SortKey.STARS)
        self.assertEqual([repo.name for repo in repos], ["a", "b"])

    def test_unknown_sort_key(self) -> None:
        with self.assertRaises(ValueError):
            sort_repositories([], "watchers")


class DeriveStatsTests(unittest.TestCase):
    def test_total_stars_ignore_filter(self) -> None:
        repos = [_repo("a", "Go", stars=3), _repo("b", "Rust", stars=4), _repo("c", None, stars=10)]
        stats = derive_stats(repos, language="Go", sort_key=SortKey.STARS)
        self.assertEqual(total_stars(repos), 17)
        self.assertEqual(stats.total_stars, 17)
        self.assertEqual([repo.name for repo in stats.repositories], ["a"])
        self.assertEqual(stats.dominant_language, "Go")
        self.assertEqual(stats.available_languages, [ALL_LANGUAGES, "Go", "Rust"])

    def test_filter_then_all_restores_sorted_list(self) -> None:
        repos = [_repo("a", "Go", stars=1), _repo("b", "Rust", stars=9), _repo("c", None, stars=5)]
        derive_stats(repos, language="Rust", sort_key=SortKey.STARS)
        stats = derive_stats(repos, language=ALL_LANGUAGES, sort_key=SortKey.STARS)
        self.assertEqual(stats.repositories, sort_repositories(repos, SortKey.STARS))

    def test_languages_counted_once(self) -> None:
        repos = [_repo("a", "Go"), _repo("b", "Rust"), _repo("c", "Go")]
        with mock.patch("gitfinder.stats.language_counts", wraps=stats.language_counts) as counter:
            result = stats.derive_stats(repos)
        self.assertEqual(counter.call_count, 1)
        self.assertEqual(result.available_languages, available_languages(repos))
        self.assertEqual(result.top_languages, top_languages(repos))

    def test_empty_list(self) -> None:
        stats = derive_stats([])
        self.assertEqual(stats.language_counts, {})
        self.assertEqual(stats.top_languages, [])
        self.assertEqual(stats.total_stars, 0)
        self.assertEqual(stats.dominant_language, NO_LANGUAGE)
        self.assertEqual(stats.repositories, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
