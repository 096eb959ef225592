"""Service test fixtures: async DB, fake feeds, pinned clock, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for the readiness probe
    - FakeFeeds installed as app.state.feed_factory, clock overridden:
      no network, no wall-clock time
    - Gate locks cleared between tests (each test runs on its own event loop)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - FakeFeeds keyed by feed ref: tests swap answers the way an oracle operator
      would push a new round
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from porgate.api.dependencies import get_clock
from porgate.config import get_settings
from porgate.db.base import Base
from porgate.infrastructure.database import get_db, DatabaseSessionManager
from porgate.services.gate_locks import _gate_locks
import porgate.infrastructure.database as db_module
import porgate.models  # noqa: F401
from porgate.main import app

from tests.services.fakes import FakeClock, FakeFeeds


@pytest.fixture(autouse=True)
def _fresh_gate_locks():
    _gate_locks.clear()
    yield
    _gate_locks.clear()


@pytest.fixture
def admin() -> str:
    return get_settings().admin_address


@pytest.fixture
def admin_headers(admin) -> dict:
    return {"X-Caller-Address": admin}


@pytest.fixture
def user_headers() -> dict:
    return {"X-Caller-Address": "0x00000000000000000000000000000000000000u1"}


@pytest.fixture
def feeds() -> FakeFeeds:
    return FakeFeeds()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory, feeds, clock):
    """FastAPI test client with DB and clock overridden, fake feeds on app.state."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.feed_factory = feeds
    app.dependency_overrides[get_clock] = lambda: clock

    # Patch db_manager for the readiness probe
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    del app.state.feed_factory
    db_module.db_manager = original_manager
