import logging
import os
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base

LOGGER = logging.getLogger(__name__)

DATABASE_FILENAME = "MyJournal.db"
DATA_DIR = Path(os.getenv("JOURNIFY_DATA_DIR", str(Path.home() / ".journify"))).expanduser()


def build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{DATA_DIR / DATABASE_FILENAME}"


def to_async_url(url: str) -> str:
    if url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    raise ValueError(f"Unsupported database URL: {url}")


class JournalDatabase:
    """Storage handle owning the engine and session factory for one SQLite file."""

    def __init__(self, url: str | None = None):
        self.url = to_async_url(url or build_database_url())
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Journal database is not started")
        return self._engine

    async def startup(self) -> None:
        if self._engine is not None:
            return
        database = make_url(self.url).database
        if database and database != ":memory:":
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(self.url)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception:
            await engine.dispose()
            raise
        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        LOGGER.info("Journal database ready at %s", database)

    async def shutdown(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Journal database is not started")
        return self._sessionmaker()


def get_database(request: Request) -> JournalDatabase:
    return request.app.state.database


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with get_database(request).session() as session:
        yield session
