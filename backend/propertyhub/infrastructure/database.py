"""Database Session Manager — async connection pool, units of work, health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - unit_of_work() commits on clean exit and rolls back on every other exit path
    - IntegrityError maps to ConflictError; other SQLAlchemy errors to DatabaseError
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - The manager is constructed in the FastAPI lifespan and stored on app.state;
      services receive it explicitly instead of importing a module singleton
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Domain errors raised inside a unit of work pass through untouched after rollback
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from propertyhub.core.errors import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str | None = None, pool_size: int = 20,
        max_overflow: int = 10, engine: AsyncEngine | None = None,
    ):
        if engine is None:
            engine = create_async_engine(
                database_url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.engine = engine
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception (read paths)."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _translate(e) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncGenerator[AsyncSession, None]:
        """One atomic transaction: commit on success, rollback on any exception."""
        async with self.session() as session:
            async with session.begin():
                yield session

    async def health_check(self) -> bool:
        """True when SELECT 1 succeeds; backs the readiness endpoint."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _translate(exc: SQLAlchemyError) -> Exception:
    if isinstance(exc, IntegrityError):
        logger.error(f"DB integrity error: {exc}")
        return ConflictError("Record conflicts with an existing entry")
    if isinstance(exc, OperationalError):
        logger.error(f"DB operational error: {exc}")
        return DatabaseError("Connection or operational error", "execute")
    if isinstance(exc, DBAPIError):
        logger.error(f"DB driver error: {exc}")
        return DatabaseError("Database driver error", "query")
    logger.error(f"SQLAlchemy error: {exc}")
    return DatabaseError("Database operation failed", "unknown")


def get_db_manager(request: Request) -> DatabaseSessionManager:
    """FastAPI dependency: the manager created by the lifespan."""
    manager = getattr(request.app.state, "db", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    return manager
