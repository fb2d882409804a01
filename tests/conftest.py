from typing import AsyncIterator

from databases import Database
import pytest
import pytest_asyncio

from db import create_db
from fakes import FakeTransport
from recipebot.repository import Repository


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncIterator[Database]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.connect()
    await create_db(database)
    yield database
    await database.disconnect()


@pytest_asyncio.fixture
async def repository(database: Database) -> Repository:
    return Repository(database)
