"""
Shared test configuration and fixtures for the OAuth store tests.

Provides a throwaway PostgreSQL database per test, schema creation from the
ORM metadata, a controllable store clock, and store fixtures.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from mcpresso.oauthstore.model import Base
from mcpresso.oauthstore.store.database import Database
from mcpresso.oauthstore.store.storage import PostgresStorage


TEST_DB_HOST = os.getenv("TEST_DB_HOST", "postgres")
TEST_DB_PORT = os.getenv("TEST_DB_PORT", "5432")
TEST_DB_USER = os.getenv("TEST_DB_USER", "postgres")
TEST_DB_PASSWORD = os.getenv("TEST_DB_PASSWORD", "password")


def database_url(name: str) -> str:
    return (
        f"postgresql+asyncpg://{TEST_DB_USER}:{TEST_DB_PASSWORD}@"
        f"{TEST_DB_HOST}:{TEST_DB_PORT}/{name}"
    )


# CREATE/DROP DATABASE go through the maintenance database.
ADMIN_DATABASE_URL = database_url("postgres")


class FakeClock:
    """Store clock the tests can move forward."""

    def __init__(self, now=None):
        self.current = now or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


async def postgres_available() -> bool:
    check_engine = create_async_engine(ADMIN_DATABASE_URL)
    try:
        async with check_engine.connect() as conn:
            await conn.scalar(text("SELECT 1"))
    except Exception:
        return False
    finally:
        await check_engine.dispose()
    return True


@pytest_asyncio.fixture(scope="function")
async def test_database():
    """URL of a database created for this test and dropped afterwards."""
    if not await postgres_available():
        pytest.skip("PostgreSQL database not available for testing")

    name = f"oauthstore_test_{uuid.uuid4().hex[:8]}"
    admin_engine = create_async_engine(ADMIN_DATABASE_URL, isolation_level="AUTOCOMMIT")
    try:
        async with admin_engine.connect() as conn:
            await conn.execute(text(f"CREATE DATABASE {name}"))
        yield database_url(name)
    finally:
        async with admin_engine.connect() as conn:
            await conn.execute(text(f"DROP DATABASE IF EXISTS {name}"))
        await admin_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def empty_engine(test_database):
    """Async engine on a database without any tables."""
    engine = create_async_engine(test_database, echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def engine(empty_engine):
    """Async engine on a database with every table created."""
    async with empty_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield empty_engine


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture(scope="function")
async def database(engine, clock):
    """Database handle whose store clock is the test's FakeClock."""
    database = Database(engine, clock=clock)
    yield database


@pytest_asyncio.fixture(scope="function")
async def db_now_database(engine):
    """Database handle that judges expiry by the server's CURRENT_TIMESTAMP."""
    yield Database(engine)


@pytest_asyncio.fixture(scope="function")
async def storage(database):
    yield PostgresStorage(database)
