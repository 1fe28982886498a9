"""Tests for the Redis WATCH/MULTI/EXEC transaction runner (fakeredis)."""

import fakeredis
import pytest
from redis.asyncio.client import Pipeline
from redis.exceptions import WatchError

from app.errors import TransactionConflictError
from app.stores.redis import run_transaction


@pytest.fixture
async def client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


@pytest.mark.asyncio
async def test_run_transaction_returns_work_result(client):
    await client.set("counter", "41")

    async def work(pipe: Pipeline) -> int:
        value = int(await pipe.get("counter")) + 1
        pipe.multi()
        pipe.set("counter", value)
        return value

    assert await run_transaction(client, "counter", work) == 42
    assert await client.get("counter") == "42"


@pytest.mark.asyncio
async def test_run_transaction_retries_after_watch_error(client):
    calls = 0

    async def work(pipe: Pipeline) -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise WatchError("key changed")
        return "ok"

    assert await run_transaction(client, "k", work, max_attempts=3) == "ok"
    assert calls == 2


@pytest.mark.asyncio
async def test_run_transaction_reruns_when_key_changes_before_exec(client):
    await client.set("counter", "0")
    calls = 0

    async def work(pipe: Pipeline) -> int:
        nonlocal calls
        calls += 1
        value = int(await pipe.get("counter"))
        if calls == 1:
            # Concurrent writer on another connection
            await client.set("counter", "10")
        pipe.multi()
        pipe.set("counter", value + 1)
        return value + 1

    assert await run_transaction(client, "counter", work, max_attempts=3) == 11
    assert calls == 2
    assert await client.get("counter") == "11"


@pytest.mark.asyncio
async def test_run_transaction_gives_up_after_max_attempts(client):
    calls = 0

    async def work(pipe: Pipeline) -> None:
        nonlocal calls
        calls += 1
        raise WatchError("key changed")

    with pytest.raises(TransactionConflictError) as exc_info:
        await run_transaction(client, "ranks:p1i1", work, max_attempts=3)

    assert calls == 3
    assert exc_info.value.key == "ranks:p1i1"
    assert exc_info.value.attempts == 3


@pytest.mark.asyncio
async def test_run_transaction_does_not_retry_other_errors(client):
    calls = 0

    async def work(pipe: Pipeline) -> None:
        nonlocal calls
        calls += 1
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await run_transaction(client, "k", work, max_attempts=3)
    assert calls == 1
