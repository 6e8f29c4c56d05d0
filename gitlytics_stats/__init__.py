"""
gitlytics-stats: GitHub contribution streaks, yearly activity and language
usage, rendered into a profile README.
"""

from .config import Config, ConfigError
from .github import ApiError, GitHubAPIError, GitHubClient, NetworkError, Repository
from .pipeline import StatsReport, build_report, update_readme
from .render import ReadmeTemplate, progress_bar, update_readme_text
from .stats import (
    LanguageShare,
    StreakSummary,
    YearStats,
    aggregate_languages,
    compute_streaks,
    compute_yearly_stats,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "Config",
    "ConfigError",
    "GitHubAPIError",
    "GitHubClient",
    "LanguageShare",
    "NetworkError",
    "ReadmeTemplate",
    "Repository",
    "StatsReport",
    "StreakSummary",
    "YearStats",
    "aggregate_languages",
    "build_report",
    "compute_streaks",
    "compute_yearly_stats",
    "progress_bar",
    "update_readme",
    "update_readme_text",
]
