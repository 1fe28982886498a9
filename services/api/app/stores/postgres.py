"""PostgreSQL store with async SQLAlchemy.

Handles:
- Engine and session factory creation
- Session scope (commit on success, rollback on error)
- Optimistic transaction runner (retry on version conflicts)

SQLite (aiosqlite) URLs are accepted too, which is what the tests use.
"""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
import logging
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm.exc import StaleDataError

from app.errors import TransactionConflictError
from app.settings import Settings

T = TypeVar("T")

logger = logging.getLogger("uvicorn.error")

# Base delay between conflicting attempts (seconds), grows linearly
CONFLICT_BACKOFF = 0.005


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    url = settings.async_database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.debug)

    return create_async_engine(
        url,
        echo=settings.debug,
        connect_args=settings.asyncpg_connect_args,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def ping_db(engine: AsyncEngine) -> None:
    """Validate connectivity with a trivial query."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session context manager.

    Usage:
        async with session_scope(factory) as session:
            result = await session.execute(query)
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def run_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    key: str,
    max_attempts: int = 10,
    conflicts: tuple[type[Exception], ...] = (StaleDataError,),
) -> T:
    """Run `work` as one read-modify-write transaction.

    `work` receives a session inside an open transaction and must only stage
    changes on it. The transaction commits when `work` returns. If the commit
    hits a version conflict (a concurrent transaction updated the same row
    first) the whole unit is rolled back and re-run from a fresh read.

    Args:
        session_factory: Session factory to open transactions with.
        work: Async callable doing the reads and staging the writes.
        key: Identifier of the record being updated, for logs/errors.
        max_attempts: Attempts before raising TransactionConflictError.
        conflicts: Errors meaning "lost a race, re-run". Upserts add
            IntegrityError: a concurrent INSERT of the same key won, the
            next attempt sees the row and takes the update path.

    Returns:
        Whatever `work` returned on the committed attempt.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            async with session_factory() as session:
                async with session.begin():
                    return await work(session)
        except conflicts:
            if attempt == max_attempts:
                break
            logger.warning(f"Write conflict on {key} (attempt {attempt}/{max_attempts}), retrying")
            await asyncio.sleep(CONFLICT_BACKOFF * attempt)

    raise TransactionConflictError(key, max_attempts)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables (there are no migrations)."""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all tables (for testing only)."""
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
