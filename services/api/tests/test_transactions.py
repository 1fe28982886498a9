"""Tests for the SQL transaction runner and backend selection."""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm.exc import StaleDataError

from app.errors import TransactionConflictError
from app.repositories import InMemoryRankRepository, open_repositories
from app.repositories.sql import SqlRankRepository, SqlUserRepository
from app.schemas import Rank
from app.settings import Settings
from app.stores.postgres import create_session_factory, run_transaction


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tx.db'}")
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.mark.asyncio
async def test_run_transaction_returns_work_result(session_factory):
    async def work(session: AsyncSession) -> int:
        result = await session.execute(text("SELECT 41 + 1"))
        return result.scalar_one()

    assert await run_transaction(session_factory, work, key="k") == 42


@pytest.mark.asyncio
async def test_run_transaction_retries_after_conflict(session_factory):
    calls = 0

    async def work(session: AsyncSession) -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise StaleDataError("row changed")
        return "ok"

    assert await run_transaction(session_factory, work, key="k", max_attempts=3) == "ok"
    assert calls == 2


@pytest.mark.asyncio
async def test_run_transaction_gives_up_after_max_attempts(session_factory):
    calls = 0

    async def work(session: AsyncSession) -> None:
        nonlocal calls
        calls += 1
        raise StaleDataError("row changed")

    with pytest.raises(TransactionConflictError) as exc_info:
        await run_transaction(session_factory, work, key="p1i1", max_attempts=3)

    assert calls == 3
    assert exc_info.value.key == "p1i1"
    assert exc_info.value.attempts == 3


@pytest.mark.asyncio
async def test_run_transaction_does_not_retry_other_errors(session_factory):
    calls = 0

    async def work(session: AsyncSession) -> None:
        nonlocal calls
        calls += 1
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await run_transaction(session_factory, work, key="k", max_attempts=3)
    assert calls == 1


@pytest.mark.asyncio
async def test_open_memory_repositories():
    repositories = await open_repositories(Settings(_env_file=None, repository_backend="memory"))
    assert isinstance(repositories.ranks, InMemoryRankRepository)
    await repositories.close()


@pytest.mark.asyncio
async def test_open_postgres_repositories_with_sqlite_url(tmp_path):
    settings = Settings(
        _env_file=None,
        repository_backend="postgres",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
        database_create_tables=True,
        transaction_max_attempts=5,
    )
    repositories = await open_repositories(settings)
    try:
        assert isinstance(repositories.ranks, SqlRankRepository)
        assert isinstance(repositories.users, SqlUserRepository)

        item = Rank.new_item("p1", "i1", 1.0, 5.0)
        await repositories.ranks.save(item)
        ranked = await repositories.ranks.rank("p1i1", 4.0)
        assert ranked is not None
        assert (ranked.average, ranked.total) == (4.0, 1)
    finally:
        await repositories.close()
