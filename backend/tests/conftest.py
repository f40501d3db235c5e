"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the full schema
    - Reference data (roles, permissions, grants, amenities, caretakers) is
      seeded once per test through `seeded`
    - Services under test receive a real DatabaseSessionManager bound to the
      test engine, never a mock

Design Decisions:
    - SQLite in-memory: fast, no external dependency; row locks and partial
      index predicates are the only PostgreSQL features not exercised here
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from propertyhub.config import Settings  # noqa: E402
from propertyhub.db.base import Base  # noqa: E402
from propertyhub.infrastructure.database import DatabaseSessionManager  # noqa: E402
import propertyhub.models  # noqa: E402,F401
from propertyhub.services.token_manager import TokenManager  # noqa: E402
from tests.seed_data import RecordingEmitter, seed_reference_data  # noqa: E402


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
def db_manager(test_engine):
    return DatabaseSessionManager(engine=test_engine)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_access_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        access_token_expiry="15m",
        refresh_token_expiry="7d",
        login_otp_code="1111",
        super_admin_creation_secret="bootstrap-secret",
        environment="test",
    )


@pytest.fixture
def tokens(settings):
    return TokenManager(settings)


@pytest.fixture
async def seeded(test_db):
    """Roles, permissions, grants and catalog rows; returns a lookup dict."""
    return await seed_reference_data(test_db)


@pytest.fixture
def emitter():
    return RecordingEmitter()
