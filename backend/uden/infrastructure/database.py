"""Database Session Manager — async engine, per-request sessions, error mapping.

Invariants:
    - A session that exits with an exception is rolled back before close
    - A unique/FK violation escaping a workflow surfaces as ConflictError (409);
      registration and billing catch their own expected violations first
    - Every other SQLAlchemy failure surfaces as DatabaseError (503)
    - PostgreSQL engines are pooled with pre-ping; SQLite engines use the
      dialect's default pool

Design Decisions:
    - Module-level db_manager set by init_db in the FastAPI lifespan
    - expire_on_commit=False: committed rows stay readable without a lazy
      refresh, which async sessions cannot do implicitly
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from uden.core.errors import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_recycle": 3600,
    }


def _translate(error: SQLAlchemyError) -> ConflictError | DatabaseError:
    if isinstance(error, IntegrityError):
        return ConflictError("Record conflicts with existing data", "RECORD_CONFLICT")
    if isinstance(error, DBAPIError):
        return DatabaseError("Database unavailable", "execute")
    return DatabaseError("Database operation failed", "session")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            mapped = _translate(e)
            logger.error(
                f"Unhandled database error ({type(e).__name__}) mapped to {mapped.code}",
                exc_info=e,
            )
            raise mapped from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session; False on any failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
