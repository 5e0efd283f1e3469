from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .activity import describe, event_icon
from .config import ViewConfig
from .models import Profile, Repository, RequestState, SortKey
from .search import SearchResult
from .stats import ALL_LANGUAGES

_ICONS = {
    "push": "⬆",
    "pull_request": "⇄",
    "star": "★",
    "create": "+",
    "fork": "⑂",
    "issue": "!",
    "activity": "•",
}


def write_report(result: SearchResult, view: ViewConfig, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    report_path = directory / f"{result.handle}-profile.md"
    report_path.write_text(render_markdown(result, view), encoding="utf-8")
    return report_path


def render_markdown(result: SearchResult, view: ViewConfig, now: Optional[datetime] = None) -> str:
    lines: List[str] = [f"# {view.title}", ""]
    if result.state is RequestState.ERROR:
        lines.append(f"> {result.error}")
        return "\n".join(lines)
    if result.profile is None:
        lines.append("Enter a GitHub username to get started.")
        return "\n".join(lines)

    lines.extend(_render_profile(result.profile))
    lines.append("")

    if view.show_languages:
        lines.extend(_render_languages(result))
        lines.append("")

    lines.extend(_render_repositories(result, view, now))
    lines.append("")

    if view.show_activity:
        lines.append("## Recent Activity")
        if result.events:
            for event in result.events:
                stamp = f" ({_format_age(event.created_at, now)})" if event.created_at else ""
                lines.append(f"- {_ICONS[event_icon(event.kind)]} {describe(event)}{stamp}")
        else:
            lines.append("No recent public activity.")
        lines.append("")

    if view.show_issues:
        lines.append("## Open Issues")
        if result.issues:
            for issue in result.issues:
                lines.append(f"- [{issue.title}]({issue.html_url}) in {issue.repo_name} #{issue.number}")
        else:
            lines.append("No open issues found.")
        lines.append("")

    if view.show_readme and result.readme:
        lines.append("## Profile README")
        lines.append(result.readme.strip())
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _render_profile(profile: Profile) -> List[str]:
    lines = [f"## {profile.display_name}", f"[@{profile.login}]({profile.html_url})"]
    if profile.bio:
        lines.extend(["", profile.bio])
    details = []
    if profile.company:
        details.append(f"Company: {profile.company}")
    if profile.location:
        details.append(f"Location: {profile.location}")
    if profile.blog:
        details.append(f"Website: {profile.blog}")
    if profile.twitter_username:
        details.append(f"Twitter: @{profile.twitter_username}")
    if profile.created_at:
        details.append(f"Joined {profile.created_at.date().isoformat()}")
    if details:
        lines.append("")
        lines.extend(f"- {detail}" for detail in details)
    lines.extend(
        [
            "",
            "| Followers | Following | Repositories | Gists |",
            "| --- | --- | --- | --- |",
            f"| {profile.followers:,} | {profile.following:,} | {profile.public_repos:,} | {profile.public_gists:,} |",
        ]
    )
    return lines


def _render_languages(result: SearchResult) -> List[str]:
    stats = result.stats
    lines = ["## Language Stats"]
    lines.append(f"Total stars: {stats.total_stars:,}")
    lines.append(f"Dominant language: {stats.dominant_language}")
    if stats.top_languages:
        lines.append("")
        for share in stats.top_languages:
            lines.append(f"- {share.language}: {share.count} repos ({share.display_percentage}%)")
    return lines


def _render_repositories(result: SearchResult, view: ViewConfig, now: Optional[datetime]) -> List[str]:
    lines = ["## Repositories"]
    narrowed = result.language != ALL_LANGUAGES or result.sort_key is not SortKey.UPDATED
    if view.show_filters or narrowed:
        lines.append(f"Language: {result.language} | Sort: {result.sort_key.value}")
        lines.append("")
    repositories = result.stats.repositories
    if not repositories:
        lines.append("No repositories found.")
        return lines
    for repo in repositories:
        lines.extend(_render_repo(repo, now))
    lines.append("")
    lines.append(f"[View all repositories](https://github.com/{result.profile.login}?tab=repositories)")
    return lines


def _render_repo(repo: Repository, now: Optional[datetime]) -> List[str]:
    lines = [f"### [{repo.name}]({repo.html_url})"]
    if repo.description:
        lines.append(repo.description)
    badges = [f"★ {repo.stars}", f"⑂ {repo.forks}"]
    if repo.language:
        badges.append(repo.language)
    if repo.updated_at:
        badges.append(f"updated {_format_age(repo.updated_at, now)}")
    lines.append(" · ".join(badges))
    if repo.topics:
        lines.append("Topics: " + ", ".join(repo.topics[:6]))
    lines.append("")
    return lines


def _format_age(moment: datetime, now: Optional[datetime] = None) -> str:
    reference = now or datetime.now(moment.tzinfo)
    seconds = max(0, int((reference - moment).total_seconds()))
    for unit, size in (("year", 365 * 86400), ("month", 30 * 86400), ("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"
