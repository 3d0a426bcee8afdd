from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from journify.database import JournalDatabase
from journify.errors import EntryNotFoundError
from journify.models import DEFAULT_CATEGORY, Base, JournalEntry
from journify.repositories import JournalEntryRepository
from tests.utils import FrozenClock, SteppingClock, make_entry


@pytest.mark.asyncio
async def test_save_new_entry_assigns_id(session):
    repo = JournalEntryRepository()
    entry = make_entry(date(2024, 3, 5), primary_mood="Happy", tags=["Work", "Health"])

    saved = await repo.save(session, entry)

    assert saved.id
    assert saved.created_at == saved.updated_at
    assert saved.category == DEFAULT_CATEGORY
    found = await repo.get_by_date(session, date(2024, 3, 5))
    assert found is not None
    assert found.id == saved.id
    assert found.tags == ["Work", "Health"]
    assert [item.id for item in await repo.get_all(session)] == [saved.id]


@pytest.mark.asyncio
async def test_save_with_zero_id_inserts(session):
    repo = JournalEntryRepository()
    saved = await repo.save(session, make_entry(date(2024, 3, 5), id=0))
    assert saved.id > 0


@pytest.mark.asyncio
async def test_resave_preserves_id_and_created_at(session):
    repo = JournalEntryRepository(clock=SteppingClock(datetime(2024, 3, 5, 9, 0)))
    entry = await repo.save(session, make_entry(date(2024, 3, 5)))
    entry_id, created_at, first_update = entry.id, entry.created_at, entry.updated_at

    entry.content = "Changed my mind."
    entry.secondary_moods = ["Calm"]
    again = await repo.save(session, entry)

    assert again.id == entry_id
    assert again.created_at == created_at
    assert again.updated_at > first_update
    assert again.secondary_moods == ["Calm"]


@pytest.mark.asyncio
async def test_resave_advances_updated_at_with_stalled_clock(session):
    repo = JournalEntryRepository(clock=FrozenClock(datetime(2024, 3, 5, 9, 0)))
    entry = await repo.save(session, make_entry(date(2024, 3, 5)))
    first_update = entry.updated_at

    again = await repo.save(session, entry)

    assert again.updated_at > first_update
    assert again.updated_at >= again.created_at


@pytest.mark.asyncio
async def test_save_detached_copy_overwrites_all_fields(session):
    repo = JournalEntryRepository()
    stored = await repo.save(
        session, make_entry(date(2024, 3, 5), title="Old", tags=["Work"], category="Travel")
    )

    replacement = JournalEntry(
        id=stored.id,
        entry_date=date(2024, 3, 6),
        title="New",
        content="Fresh text",
    )
    result = await repo.save(session, replacement)

    assert result.id == stored.id
    assert result.title == "New"
    assert result.entry_date == date(2024, 3, 6)
    assert result.tags == []
    assert replacement.created_at == stored.created_at


@pytest.mark.asyncio
async def test_update_missing_entry_raises(session):
    repo = JournalEntryRepository()
    with pytest.raises(EntryNotFoundError):
        await repo.save(session, make_entry(date(2024, 3, 5), id=999))


@pytest.mark.asyncio
async def test_delete_removes_entry(session):
    repo = JournalEntryRepository()
    entry = await repo.save(session, make_entry(date(2024, 3, 5)))

    await repo.delete(session, entry)

    assert await repo.get_all(session) == []
    with pytest.raises(EntryNotFoundError):
        await repo.delete(session, entry)


@pytest.mark.asyncio
async def test_get_by_date_accepts_datetime(session):
    repo = JournalEntryRepository()
    await repo.save(session, make_entry(date(2024, 3, 5)))

    assert await repo.get_by_date(session, datetime(2024, 3, 5, 23, 59)) is not None
    assert await repo.get_by_date(session, date(2024, 3, 6)) is None


@pytest.mark.asyncio
async def test_get_all_is_newest_first(session):
    repo = JournalEntryRepository()
    for day in (date(2024, 1, 2), date(2024, 1, 9), date(2024, 1, 5)):
        await repo.save(session, make_entry(day))

    result = await repo.get_all(session)

    assert [entry.entry_date for entry in result] == [
        date(2024, 1, 9),
        date(2024, 1, 5),
        date(2024, 1, 2),
    ]


@pytest.mark.asyncio
async def test_pages_concatenate_to_get_all(session):
    repo = JournalEntryRepository()
    start = date(2024, 2, 1)
    for offset in range(7):
        await repo.save(session, make_entry(start + timedelta(days=offset * 2)))
    # a second entry on an existing day exercises the id tie-break
    await repo.save(session, make_entry(start))

    everything = await repo.get_all(session)
    first = await repo.get_paged(session, 0, 3)
    second = await repo.get_paged(session, 3, 4)

    assert [e.id for e in first + second] == [e.id for e in everything[:7]]
    assert len({e.id for e in first + second}) == 7
    assert await repo.get_paged(session, 100, 5) == []


@pytest.mark.asyncio
async def test_range_is_inclusive_and_oldest_first(session):
    repo = JournalEntryRepository()
    for day in (date(2024, 4, 1), date(2024, 4, 3), date(2024, 4, 5), date(2024, 4, 7)):
        await repo.save(session, make_entry(day))

    result = await repo.get_by_range(session, date(2024, 4, 3), date(2024, 4, 7))

    assert [entry.entry_date for entry in result] == [
        date(2024, 4, 3),
        date(2024, 4, 5),
        date(2024, 4, 7),
    ]


@pytest.mark.asyncio
async def test_single_day_range(session):
    repo = JournalEntryRepository()
    saved = await repo.save(session, make_entry(date(2024, 4, 3)))

    hit = await repo.get_by_range(session, date(2024, 4, 3), date(2024, 4, 3))
    miss = await repo.get_by_range(session, date(2024, 4, 4), date(2024, 4, 4))

    assert [entry.id for entry in hit] == [saved.id]
    assert miss == []


@pytest.mark.asyncio
async def test_reversed_range_is_empty(session):
    repo = JournalEntryRepository()
    await repo.save(session, make_entry(date(2024, 4, 3)))

    assert await repo.get_by_range(session, date(2024, 4, 5), date(2024, 4, 1)) == []


@pytest.mark.asyncio
async def test_entry_dates_are_distinct(session):
    repo = JournalEntryRepository()
    await repo.save(session, make_entry(date(2024, 4, 3)))
    await repo.save(session, make_entry(date(2024, 4, 3)))
    await repo.save(session, make_entry(date(2024, 4, 4)))

    assert await repo.list_entry_dates(session) == {date(2024, 4, 3), date(2024, 4, 4)}


@pytest.mark.asyncio
async def test_database_startup_is_idempotent(database):
    engine = database.engine
    await database.startup()
    assert database.engine is engine


@pytest.mark.asyncio
async def test_save_entry_without_moods_or_tags(session):
    repo = JournalEntryRepository()

    saved = await repo.save(session, make_entry(date(2024, 3, 5)))
    saved.tags = ["Work"]
    await repo.save(session, saved)
    saved.tags = []
    again = await repo.save(session, saved)

    stored = await session.execute(
        text("SELECT secondary_moods, tags FROM journal_entries WHERE id = :id"),
        {"id": saved.id},
    )
    assert stored.one() == (None, None)
    assert again.secondary_moods == []
    assert again.tags == []


@pytest.mark.asyncio
async def test_failed_startup_disposes_engine(tmp_path, monkeypatch):
    disposed = []
    original_dispose = AsyncEngine.dispose

    async def recording_dispose(self, *args, **kwargs):
        disposed.append(self)
        await original_dispose(self, *args, **kwargs)

    def broken_create_all(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(AsyncEngine, "dispose", recording_dispose)
    monkeypatch.setattr(Base.metadata, "create_all", broken_create_all)
    db = JournalDatabase(f"sqlite:///{tmp_path / 'journal.db'}")

    with pytest.raises(RuntimeError, match="disk full"):
        await db.startup()

    assert len(disposed) == 1
    with pytest.raises(RuntimeError, match="not started"):
        db.session()
