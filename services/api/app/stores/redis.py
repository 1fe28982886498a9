"""Redis store used as a document store.

Handles:
- Client creation and connectivity check
- Document keys (one hash per record: "<collection>:<id>")
- Optimistic transactions (WATCH / MULTI / EXEC with retry)

Hash fields use the camelCase names of the persisted record shape.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import TypeVar

import redis.asyncio as redis
from redis.asyncio.client import Pipeline
from redis.exceptions import WatchError

from app.errors import TransactionConflictError
from app.settings import Settings

T = TypeVar("T")

# Collections
COLLECTION_RANKS = "ranks"
COLLECTION_USERS = "users"

# Base delay between conflicting attempts (seconds), grows linearly
CONFLICT_BACKOFF = 0.005

logger = logging.getLogger("uvicorn.error")


async def create_redis(settings: Settings) -> redis.Redis:
    """Create a Redis client and validate connectivity."""
    client = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await client.ping()
    logger.info("Redis connected")
    return client


async def close_redis(client: redis.Redis) -> None:
    """Close Redis connection."""
    await client.aclose()


def document_key(collection: str, id: str) -> str:
    """Key of the hash holding a document.

    Example: ("ranks", "p1i1") -> "ranks:p1i1"
    """
    return f"{collection}:{id}"


async def run_transaction(
    client: redis.Redis,
    key: str,
    work: Callable[[Pipeline], Awaitable[T]],
    *,
    max_attempts: int = 10,
) -> T:
    """Run `work` as one read-modify-write unit on `key`.

    `key` is WATCHed before `work` runs, so the pipeline is in immediate
    mode and `work` can read from it. To write, `work` calls `pipe.multi()`
    and queues commands; they are applied by EXEC only if nobody modified
    `key` in between. Otherwise EXEC fails with WatchError and the unit is
    re-run from a fresh read.

    Args:
        client: Redis client.
        key: Watched document key.
        work: Async callable doing the reads and queueing the writes.
        max_attempts: Attempts before raising TransactionConflictError.

    Returns:
        Whatever `work` returned on the committed attempt.
    """
    for attempt in range(1, max_attempts + 1):
        async with client.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                result = await work(pipe)
                await pipe.execute()
                return result
            except WatchError:
                if attempt == max_attempts:
                    break
                logger.warning(f"Write conflict on {key} (attempt {attempt}/{max_attempts}), retrying")
        await asyncio.sleep(CONFLICT_BACKOFF * attempt)

    raise TransactionConflictError(key, max_attempts)
