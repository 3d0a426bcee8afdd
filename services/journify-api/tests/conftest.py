import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from journify.database import JournalDatabase  # noqa: E402
from journify.main import app  # noqa: E402
from journify.theme import ThemeState  # noqa: E402


@pytest.fixture(autouse=True)
def disable_db_lifecycle():
    app.router.on_startup.clear()
    app.router.on_shutdown.clear()
    yield


@pytest_asyncio.fixture
async def database(tmp_path):
    db = JournalDatabase(f"sqlite:///{tmp_path / 'journal.db'}")
    await db.startup()
    yield db
    await db.shutdown()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def api_client(database):
    app.state.database = database
    app.state.theme = ThemeState()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    del app.state.database
