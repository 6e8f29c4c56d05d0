"""Tests for streak, yearly and language statistics."""

import datetime as dt
import random
from unittest.mock import Mock

from gitlytics_stats.github import ApiError, Repository
from gitlytics_stats.stats import (
    EXCLUDED_LANGUAGES,
    StreakSummary,
    YearStats,
    aggregate_languages,
    collect_language_stats,
    compute_streaks,
    compute_yearly_stats,
    language_shares,
)

TODAY = dt.date(2026, 10, 16)


def days_before(n):
    return TODAY - dt.timedelta(days=n)


class TestComputeStreaks:
    def test_empty(self):
        assert compute_streaks([], today=TODAY) == StreakSummary(0, 0, 0)

    def test_five_consecutive_days_ending_today(self):
        dates = [days_before(i) for i in range(5)]
        result = compute_streaks(dates, today=TODAY)
        assert result.current == 5
        assert result.longest >= 5
        assert result.total == 5

    def test_today_then_gap_then_three_days(self):
        dates = [TODAY, days_before(2), days_before(3), days_before(4)]
        result = compute_streaks(dates, today=TODAY)
        assert result.current == 1
        assert result.longest == 3
        assert result.total == 4

    def test_no_commit_today_means_no_current_streak(self):
        dates = [days_before(1), days_before(2)]
        result = compute_streaks(dates, today=TODAY)
        assert result.current == 0
        assert result.longest == 2

    def test_duplicates_collapse(self):
        dates = ["2026-10-16", "2026-10-16", "2026-10-15T10:00:00Z", "2026-10-15"]
        result = compute_streaks(dates, today=TODAY)
        assert result == StreakSummary(current=2, longest=2, total=2)

    def test_longest_run_in_the_past(self):
        dates = [days_before(i) for i in (0, 10, 11, 12, 13, 14, 20)]
        result = compute_streaks(dates, today=TODAY)
        assert result.current == 1
        assert result.longest == 5

    def test_order_does_not_matter(self):
        dates = [days_before(i) for i in (0, 1, 2, 7, 8)]
        shuffled = list(dates)
        random.Random(3).shuffle(shuffled)
        assert compute_streaks(dates, today=TODAY) == compute_streaks(shuffled, today=TODAY)

    def test_streak_across_year_boundary(self):
        today = dt.date(2026, 1, 2)
        dates = ["2026-01-02", "2026-01-01", "2025-12-31"]
        assert compute_streaks(dates, today=today).current == 3


class TestComputeYearlyStats:
    def test_groups_and_sorts_descending(self):
        dates = ["2024-03-01", "2024-03-01", "2024-05-02", "2026-01-01", "2025-07-07"]
        assert compute_yearly_stats(dates) == [
            YearStats(year=2026, active_days=1, contributions=1),
            YearStats(year=2025, active_days=1, contributions=1),
            YearStats(year=2024, active_days=2, contributions=3),
        ]

    def test_reordering_gives_same_result(self):
        dates = ["2023-01-0%d" % d for d in range(1, 8)] + ["2024-02-02"] * 3 + ["2025-12-31"]
        shuffled = list(dates)
        random.Random(7).shuffle(shuffled)
        assert compute_yearly_stats(shuffled) == compute_yearly_stats(dates)

    def test_empty(self):
        assert compute_yearly_stats([]) == []


class TestLanguages:
    def test_percentages_one_decimal_and_top_ten(self):
        breakdowns = [{f"Lang{i}": (i + 1) * 100 for i in range(15)}]
        shares = aggregate_languages(breakdowns)
        assert len(shares) == 10
        for share in shares:
            _, frac = share.percentage.split(".")
            assert len(frac) == 1
        values = [s.value for s in shares]
        assert values == sorted(values, reverse=True)

    def test_sum_of_all_languages_does_not_exceed_100(self):
        for count in (3, 6, 7, 9, 11):
            totals = {f"L{i}": 1 for i in range(count)}
            shares = language_shares(totals, limit=len(totals))
            tenths = sum(int(s.percentage.replace(".", "")) for s in shares)
            assert tenths == 1000

    def test_six_equal_languages_round_by_largest_remainder(self):
        shares = aggregate_languages([{f"L{i}": 1 for i in range(6)}])
        assert [(s.name, s.percentage) for s in shares] == [
            ("L0", "16.7"),
            ("L1", "16.7"),
            ("L2", "16.7"),
            ("L3", "16.7"),
            ("L4", "16.6"),
            ("L5", "16.6"),
        ]

    def test_larger_byte_count_never_gets_smaller_share(self):
        shares = aggregate_languages([{"Small": 1, "Big": 2, "Mid": 1}])
        assert [(s.name, s.percentage) for s in shares] == [
            ("Big", "50.0"),
            ("Small", "25.0"),
            ("Mid", "25.0"),
        ]

    def test_top_ten_of_many_stays_within_100(self):
        shares = aggregate_languages([{f"L{i}": 1 for i in range(12)}])
        assert len(shares) == 10
        assert sum(s.value for s in shares) <= 100.0

    def test_sums_across_repositories(self):
        shares = aggregate_languages([{"Python": 300, "Go": 100}, {"Python": 100, "Shell": 500}])
        assert [(s.name, s.percentage) for s in shares] == [
            ("Shell", "50.0"),
            ("Python", "40.0"),
            ("Go", "10.0"),
        ]

    def test_excluded_languages_are_dropped_even_when_largest(self):
        shares = aggregate_languages([
            {"Open Policy Agent": 10_000_000, "SCSS": 5_000_000, "Scss": 5_000_000, "Python": 10},
        ])
        assert [s.name for s in shares] == ["Python"]
        assert shares[0].percentage == "100.0"

    def test_exclusion_is_case_sensitive(self):
        shares = aggregate_languages([{"scss": 10, "open policy agent": 10}])
        assert {s.name for s in shares} == {"scss", "open policy agent"}
        assert EXCLUDED_LANGUAGES == {"Open Policy Agent", "SCSS", "Scss"}

    def test_ties_keep_first_seen_order(self):
        shares = aggregate_languages([{"Rust": 50, "Go": 50}])
        assert [s.name for s in shares] == ["Rust", "Go"]

    def test_no_bytes(self):
        assert aggregate_languages([]) == []
        assert aggregate_languages([{"Python": 0}]) == []


def test_collect_language_stats_skips_failing_repository():
    repos = [Repository("me", "a"), Repository("me", "broken"), Repository("me", "b")]

    def get_languages(repo):
        if repo.name == "broken":
            raise ApiError(404, "Not Found")
        return {"Python": 100} if repo.name == "a" else {"JavaScript": 100}

    client = Mock()
    client.get_languages.side_effect = get_languages

    shares = collect_language_stats(client, repos)

    assert client.get_languages.call_count == 3
    assert [(s.name, s.percentage) for s in shares] == [("Python", "50.0"), ("JavaScript", "50.0")]
