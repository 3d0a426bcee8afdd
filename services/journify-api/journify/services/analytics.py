from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import JournalEntryRepository

MISSED_DAYS_WINDOW = 30

_WORD_SEPARATORS = re.compile(r"[ \n\r]+")
_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class AdvancedStats:
    longest_streak: int
    missed_in_last_30_days: int


@dataclass(frozen=True)
class JournalSummary:
    current_streak: int
    longest_streak: int
    missed_in_last_30_days: int
    total_words: int


def count_words(text: str | None) -> int:
    if not text:
        return 0
    return sum(1 for word in _WORD_SEPARATORS.split(text) if word)


def current_streak(entry_dates: Iterable[date], today: date) -> int:
    dates = set(entry_dates)
    yesterday = today - _ONE_DAY
    if today not in dates and yesterday not in dates:
        return 0
    check = today if today in dates else yesterday
    streak = 0
    while check in dates:
        streak += 1
        check -= _ONE_DAY
    return streak


def longest_streak(entry_dates: Iterable[date]) -> int:
    """Longest chain of day-to-day transitions, plus one.

    Returns 0 when there are no dates at all.
    """
    dates = sorted(set(entry_dates), reverse=True)
    if not dates:
        return 0
    longest = 0
    current = 0
    for newer, older in zip(dates, dates[1:]):
        if newer - older == _ONE_DAY:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest + 1


def missed_days(entry_dates: Iterable[date], today: date, window: int = MISSED_DAYS_WINDOW) -> int:
    dates = set(entry_dates)
    day = today - timedelta(days=window)
    missed = 0
    while day <= today:
        if day not in dates:
            missed += 1
        day += _ONE_DAY
    return missed


def advanced_stats(entry_dates: Iterable[date], today: date) -> AdvancedStats:
    dates = set(entry_dates)
    if not dates:
        return AdvancedStats(longest_streak=0, missed_in_last_30_days=0)
    return AdvancedStats(
        longest_streak=longest_streak(dates),
        missed_in_last_30_days=missed_days(dates, today),
    )


class JournalAnalytics:
    """Streak and word-count statistics read through the entry repository."""

    def __init__(
        self,
        session: AsyncSession,
        repository: JournalEntryRepository | None = None,
    ):
        self._session = session
        self._repo = repository or JournalEntryRepository()

    async def current_streak(self, today: date | None = None) -> int:
        dates = await self._repo.list_entry_dates(self._session)
        return current_streak(dates, today or date.today())

    async def total_words(self) -> int:
        contents = await self._repo.list_contents(self._session)
        return sum(count_words(content) for content in contents)

    async def advanced_stats(self, today: date | None = None) -> AdvancedStats:
        dates = await self._repo.list_entry_dates(self._session)
        return advanced_stats(dates, today or date.today())

    async def summary(self, today: date | None = None) -> JournalSummary:
        today = today or date.today()
        dates = await self._repo.list_entry_dates(self._session)
        stats = advanced_stats(dates, today)
        return JournalSummary(
            current_streak=current_streak(dates, today),
            longest_streak=stats.longest_streak,
            missed_in_last_30_days=stats.missed_in_last_30_days,
            total_words=await self.total_words(),
        )
