from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import EntryNotFoundError
from ..models import DEFAULT_CATEGORY, EDITABLE_FIELDS, JournalEntry

LOGGER = logging.getLogger(__name__)

_MIN_TICK = timedelta(microseconds=1)


def as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_unsaved(entry: JournalEntry) -> bool:
    return not entry.id


class JournalEntryRepository:
    """Repository for journal entry database operations."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def _next_timestamp(self, previous: datetime | None = None) -> datetime:
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + _MIN_TICK
        return now

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, session: AsyncSession, entry_id: int) -> JournalEntry | None:
        return await session.get(JournalEntry, entry_id)

    async def get_by_date(
        self, session: AsyncSession, day: date | datetime
    ) -> JournalEntry | None:
        """Return the first entry written for the given calendar day."""
        start = as_day(day)
        end = start + timedelta(days=1)
        result = await session.execute(
            select(JournalEntry)
            .where(JournalEntry.entry_date >= start, JournalEntry.entry_date < end)
            .order_by(JournalEntry.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_all(self, session: AsyncSession) -> list[JournalEntry]:
        result = await session.execute(
            select(JournalEntry).order_by(
                JournalEntry.entry_date.desc(), JournalEntry.id.desc()
            )
        )
        return list(result.scalars().all())

    async def get_paged(
        self, session: AsyncSession, skip: int, take: int
    ) -> list[JournalEntry]:
        """Window over the newest-first ordering used by ``get_all``."""
        result = await session.execute(
            select(JournalEntry)
            .order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc())
            .offset(skip)
            .limit(take)
        )
        return list(result.scalars().all())

    async def get_by_range(
        self, session: AsyncSession, start: date | datetime, end: date | datetime
    ) -> list[JournalEntry]:
        """Entries dated from ``start`` through ``end`` inclusive, oldest first."""
        result = await session.execute(
            select(JournalEntry)
            .where(
                JournalEntry.entry_date >= as_day(start),
                JournalEntry.entry_date <= as_day(end),
            )
            .order_by(JournalEntry.entry_date.asc(), JournalEntry.id.asc())
        )
        return list(result.scalars().all())

    async def list_entry_dates(self, session: AsyncSession) -> set[date]:
        result = await session.execute(select(JournalEntry.entry_date).distinct())
        return set(result.scalars().all())

    async def list_contents(self, session: AsyncSession) -> list[str | None]:
        result = await session.execute(select(JournalEntry.content))
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def save(self, session: AsyncSession, entry: JournalEntry) -> JournalEntry:
        """Insert an unsaved entry or overwrite the stored entry with the same id."""
        if not entry.category:
            entry.category = DEFAULT_CATEGORY
        if is_unsaved(entry):
            now = self._next_timestamp()
            entry.id = None
            entry.created_at = now
            entry.updated_at = now
            session.add(entry)
            await session.commit()
            await session.refresh(entry)
            LOGGER.info("Created journal entry id=%s date=%s", entry.id, entry.entry_date)
            return entry

        stored = await session.get(JournalEntry, entry.id)
        if stored is None:
            raise EntryNotFoundError(entry.id)
        if stored is not entry:
            for field in EDITABLE_FIELDS:
                setattr(stored, field, getattr(entry, field))
        stored.updated_at = self._next_timestamp(stored.updated_at)
        await session.commit()
        await session.refresh(stored)
        if stored is not entry:
            entry.created_at = stored.created_at
            entry.updated_at = stored.updated_at
        LOGGER.info("Updated journal entry id=%s", stored.id)
        return stored

    async def delete(self, session: AsyncSession, entry: JournalEntry) -> None:
        result = await session.execute(
            delete(JournalEntry).where(JournalEntry.id == entry.id)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise EntryNotFoundError(entry.id)
        await session.commit()
        LOGGER.info("Deleted journal entry id=%s", entry.id)
