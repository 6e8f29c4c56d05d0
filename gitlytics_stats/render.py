"""
Markdown rendering and README splicing.

The README carries named slots delimited by HTML comments:

    <!-- STREAK_START -->
    ...replaced on every run...
    <!-- STREAK_END -->

plus a `*Last Updated: ...*` line. ReadmeTemplate fills the slots in memory;
the caller writes the result back once.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from typing import Dict, Optional, Sequence

from .stats import LanguageShare, StreakSummary, YearStats

logger = logging.getLogger(__name__)

BAR_LENGTH = 20
BAR_FILLED = "█"
BAR_EMPTY = "░"
NAME_WIDTH = 12
PERCENT_WIDTH = 5

STREAK_SLOT = "STREAK"
YEARLY_SLOT = "YEARLY"
LANGUAGES_SLOT = "LANGUAGES"

LAST_UPDATED_RE = re.compile(r"\*Last Updated:.*\*")
LAST_UPDATED_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


# -----------------------------
# Fragments
# -----------------------------
def progress_bar(percentage: float, length: int = BAR_LENGTH) -> str:
    # Half rounds up.
    filled = int(math.floor(percentage / 100 * length + 0.5))
    filled = max(0, min(length, filled))
    return BAR_FILLED * filled + BAR_EMPTY * (length - filled)


def render_streaks(streaks: StreakSummary) -> str:
    return (
        f"**Current Streak:** {streaks.current} days  \n"
        f"**Longest Streak:** {streaks.longest} days  \n"
        f"**Total Active Days:** {streaks.total} days"
    )


def render_yearly(yearly: Sequence[YearStats]) -> str:
    lines = [
        "| Year | Active Days | Contributions |",
        "|------|-------------|---------------|",
    ]
    lines += [f"| {y.year} | {y.active_days} | {y.contributions} |" for y in yearly]
    return "\n".join(lines)


def render_languages(languages: Sequence[LanguageShare]) -> str:
    rows = [
        f"{lang.name.ljust(NAME_WIDTH)} {progress_bar(lang.value)} {lang.percentage.rjust(PERCENT_WIDTH)}%"
        for lang in languages
    ]
    return "```\n" + "\n".join(rows) + "\n```"


def format_timestamp(now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(dt.timezone.utc)
    return now.strftime(LAST_UPDATED_FORMAT)


# -----------------------------
# Template
# -----------------------------
class ReadmeTemplate:
    """
    README text with named, comment-delimited slots.

    fill() replaces the first START/END pair of a slot; a slot whose markers
    are missing leaves the text untouched and is reported by missing_slots.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.missing_slots: list = []

    @staticmethod
    def _slot_pattern(slot: str) -> "re.Pattern[str]":
        return re.compile(rf"<!-- {re.escape(slot)}_START -->.*?<!-- {re.escape(slot)}_END -->", re.DOTALL)

    def fill(self, slot: str, fragment: str) -> "ReadmeTemplate":
        block = f"<!-- {slot}_START -->\n{fragment}\n<!-- {slot}_END -->"
        new_text, n = self._slot_pattern(slot).subn(lambda _m: block, self.text, count=1)
        if not n:
            logger.warning("README has no %s_START/%s_END markers; section left unchanged", slot, slot)
            self.missing_slots.append(slot)
        self.text = new_text
        return self

    def stamp(self, now: Optional[dt.datetime] = None) -> "ReadmeTemplate":
        line = f"*Last Updated: {format_timestamp(now)}*"
        new_text, n = LAST_UPDATED_RE.subn(lambda _m: line, self.text, count=1)
        if not n:
            logger.debug("README has no '*Last Updated:' line")
        self.text = new_text
        return self


def render_fragments(
    streaks: StreakSummary,
    yearly: Sequence[YearStats],
    languages: Sequence[LanguageShare],
) -> Dict[str, str]:
    return {
        STREAK_SLOT: render_streaks(streaks),
        YEARLY_SLOT: render_yearly(yearly),
        LANGUAGES_SLOT: render_languages(languages),
    }


def update_readme_text(
    text: str,
    streaks: StreakSummary,
    yearly: Sequence[YearStats],
    languages: Sequence[LanguageShare],
    now: Optional[dt.datetime] = None,
) -> str:
    """Apply the three slot substitutions and the timestamp to `text`."""
    template = ReadmeTemplate(text)
    for slot, fragment in render_fragments(streaks, yearly, languages).items():
        template.fill(slot, fragment)
    return template.stamp(now).text
