from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import Config
from .github import GitHubAPIError, GitHubClient, Repository
from .render import render_fragments, update_readme_text
from .stats import (
    LanguageShare,
    StreakSummary,
    YearStats,
    collect_language_stats,
    compute_streaks,
    compute_yearly_stats,
    to_json,
)

logger = logging.getLogger(__name__)


@dataclass
class StatsReport:
    username: str
    repo_count: int
    streaks: StreakSummary
    yearly: List[YearStats] = field(default_factory=list)
    languages: List[LanguageShare] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {"username": self.username, "repos_analyzed": self.repo_count, **to_json(self.streaks, self.yearly, self.languages)}

    def fragments(self) -> Dict[str, str]:
        return render_fragments(self.streaks, self.yearly, self.languages)


def commit_dates(commits: Sequence[Dict[str, Any]]) -> List[str]:
    """`YYYY-MM-DD` author dates of the given commit payloads."""
    out: List[str] = []
    for c in commits:
        author = (c.get("commit") or {}).get("author") or {}
        date = author.get("date")
        if date:
            out.append(date.split("T")[0])
    return out


def collect_commit_dates(client: GitHubClient, repos: Sequence[Repository], author: str) -> List[str]:
    """
    Author dates of the user's commits across `repos`, duplicates kept.

    A repository whose commits cannot be fetched contributes nothing.
    """
    dates: List[str] = []
    for repo in repos:
        try:
            commits = client.list_commits(repo, author)
        except GitHubAPIError as e:
            logger.warning("Could not fetch commits for %s: %s", repo.full_name, e)
            continue
        dates.extend(commit_dates(commits))
    return dates


def build_report(client: GitHubClient, config: Config, today: Optional[dt.date] = None) -> StatsReport:
    logger.info("Fetching repositories...")
    repos = client.list_repositories()
    logger.info("Found %d repositories", len(repos))

    logger.info("Fetching commit data...")
    dates = collect_commit_dates(client, repos, config.username)

    logger.info("Calculating statistics...")
    return StatsReport(
        username=config.username,
        repo_count=len(repos),
        streaks=compute_streaks(dates, today=today),
        yearly=compute_yearly_stats(dates),
        languages=collect_language_stats(client, repos),
    )


def update_readme(config: Config, client: Optional[GitHubClient] = None, now: Optional[dt.datetime] = None) -> StatsReport:
    """
    Full run: fetch, compute, rewrite the README in one write.

    Listing failures and README I/O errors propagate to the caller.
    """
    client = client or GitHubClient(config)
    today = None
    if now is not None:
        today = (now.astimezone(dt.timezone.utc) if now.tzinfo else now).date()
    report = build_report(client, config, today=today)

    with open(config.readme_path, "r", encoding="utf-8", newline="") as f:
        text = f.read()

    text = update_readme_text(text, report.streaks, report.yearly, report.languages, now=now)

    with open(config.readme_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

    logger.info("%s updated successfully!", config.readme_path)
    return report
