"""
Contribution statistics: streaks, yearly activity and language distribution.

Everything here except collect_language_stats is pure and works on plain
dates / dicts so it can be tested without the network.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .github import GitHubAPIError, GitHubClient, Repository

logger = logging.getLogger(__name__)

# Matched exactly, case-sensitive.
EXCLUDED_LANGUAGES = frozenset({"Open Policy Agent", "SCSS", "Scss"})
TOP_LANGUAGES = 10


@dataclass(frozen=True)
class StreakSummary:
    current: int = 0
    longest: int = 0
    total: int = 0


@dataclass(frozen=True)
class YearStats:
    year: int
    active_days: int
    contributions: int


@dataclass(frozen=True)
class LanguageShare:
    name: str
    percentage: str  # one decimal place, e.g. "42.7"

    @property
    def value(self) -> float:
        return float(self.percentage)


def _today_utc() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def _as_date(d: Any) -> dt.date:
    if isinstance(d, dt.datetime):
        return d.date()
    if isinstance(d, dt.date):
        return d
    return dt.date.fromisoformat(str(d)[:10])


# -----------------------------
# Streaks
# -----------------------------
def compute_streaks(dates: Iterable[Any], today: Optional[dt.date] = None) -> StreakSummary:
    """
    Current streak, longest streak and number of distinct active days.

    `dates` may contain duplicates and be in any order; items are dates,
    datetimes or ISO strings. The current streak counts back from `today`
    (UTC) and is 0 when today has no commit.
    """
    days = {_as_date(d) for d in dates}
    if not days:
        return StreakSummary()

    one = dt.timedelta(days=1)
    check = today or _today_utc()
    current = 0
    while check in days:
        current += 1
        check -= one

    ordered = sorted(days, reverse=True)
    longest = 0
    run = 0
    prev: Optional[dt.date] = None
    for d in ordered:
        if prev is not None and (prev - d).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        prev = d
    longest = max(longest, run)

    return StreakSummary(current=current, longest=longest, total=len(days))


# -----------------------------
# Yearly activity
# -----------------------------
def compute_yearly_stats(dates: Iterable[Any]) -> List[YearStats]:
    """Per-year distinct active days and raw commit counts, newest year first."""
    active: Dict[int, set] = {}
    contributions: Dict[int, int] = {}
    for raw in dates:
        d = _as_date(raw)
        active.setdefault(d.year, set()).add(d)
        contributions[d.year] = contributions.get(d.year, 0) + 1

    return [
        YearStats(year=year, active_days=len(active[year]), contributions=contributions[year])
        for year in sorted(active, reverse=True)
    ]


# -----------------------------
# Languages
# -----------------------------
def sum_language_bytes(breakdowns: Iterable[Mapping[str, int]]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for breakdown in breakdowns:
        for lang, size in breakdown.items():
            if lang in EXCLUDED_LANGUAGES:
                continue
            totals[lang] = totals.get(lang, 0) + int(size or 0)
    return totals


def language_shares(totals: Mapping[str, int], limit: int = TOP_LANGUAGES) -> List[LanguageShare]:
    """
    Top `limit` languages by share of all bytes.

    Percentages are rounded to tenths with the largest-remainder method, so
    the shares of all languages add up to exactly 100.0. Languages with the
    same rounded value keep their first-seen order.
    """
    total = sum(totals.values())
    if total <= 0:
        return []

    names = list(totals)
    # Work in integer tenths of a percent: 1000 == 100.0%.
    tenths = [totals[lang] * 1000 // total for lang in names]
    remainders = [totals[lang] * 1000 % total for lang in names]
    leftover = 1000 - sum(tenths)
    for i in sorted(range(len(names)), key=lambda i: remainders[i], reverse=True)[:leftover]:
        tenths[i] += 1

    order = sorted(range(len(names)), key=lambda i: tenths[i], reverse=True)
    return [
        LanguageShare(name=names[i], percentage=f"{tenths[i] // 10}.{tenths[i] % 10}")
        for i in order[:limit]
    ]


def aggregate_languages(breakdowns: Iterable[Mapping[str, int]], limit: int = TOP_LANGUAGES) -> List[LanguageShare]:
    return language_shares(sum_language_bytes(breakdowns), limit=limit)


def collect_language_stats(client: GitHubClient, repos: Sequence[Repository]) -> List[LanguageShare]:
    """
    Fetch the language breakdown of every repository and aggregate it.

    A repository whose languages cannot be fetched is logged and skipped.
    """
    breakdowns: List[Dict[str, int]] = []
    for repo in repos:
        try:
            breakdown = client.get_languages(repo)
        except GitHubAPIError as e:
            logger.warning("Could not fetch languages for %s: %s", repo.full_name, e)
            continue
        breakdowns.append(breakdown)
        included = [lang for lang in breakdown if lang not in EXCLUDED_LANGUAGES]
        if included:
            logger.debug("%s: %s", repo.name, ", ".join(included))

    totals = sum_language_bytes(breakdowns)
    grand_total = sum(totals.values())
    if grand_total:
        logger.info("Total bytes per language:")
        for lang, size in sorted(totals.items(), key=lambda kv: kv[1], reverse=True):
            logger.info("  %s: %.2f MB (%.1f%%)", lang, size / 1024 / 1024, size / grand_total * 100)
    return language_shares(totals)


# -----------------------------
# Serialization
# -----------------------------
def to_json(streaks: StreakSummary, yearly: Sequence[YearStats], languages: Sequence[LanguageShare]) -> Dict[str, Any]:
    return {
        "streaks": asdict(streaks),
        "yearly": [asdict(y) for y in yearly],
        "languages": [asdict(lang) for lang in languages],
    }
