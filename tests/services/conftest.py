"""Service test fixtures — async DB, assignment engine, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database (StaticPool, one connection)
    - The engine uses a seeded Random and a fixed clock
    - The client's app.state carries the test db_manager and engine; the
      lifespan (migrations, real pool) never runs

Design Decisions:
    - SQLite in-memory: fast, no external dependency; ON CONFLICT and RETURNING
      behave like PostgreSQL for the statements used here
    - Concurrent interleavings are simulated inside one transaction by
      patching the repository at the step where a rival would have committed
"""

import random

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from reviewhub.db.base import Base
from reviewhub.infrastructure.database import DatabaseSessionManager
from reviewhub.main import app
from reviewhub.services.assignment_engine import AssignmentEngine
import reviewhub.models  # noqa: F401
from tests.services.factories import MERGE_TIME, member


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager(test_engine)


@pytest.fixture
def engine(db_manager):
    return AssignmentEngine(
        db_manager, rng=random.Random(1234), clock=lambda: MERGE_TIME,
    )


@pytest.fixture
async def backend_team(engine):
    """Team "Backend" with active alice, bob, carol."""
    return await engine.create_team(
        "Backend", [member("alice"), member("bob"), member("carol")],
    )


@pytest.fixture
async def client(db_manager, engine):
    """FastAPI test client with the test engine on app.state."""
    app.state.db_manager = db_manager
    app.state.engine = engine

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state.db_manager = None
    app.state.engine = None
