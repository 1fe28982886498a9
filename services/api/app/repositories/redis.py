"""Redis repositories: one hash per document.

rank() reads the hash under WATCH, folds the score in with
Rank.update_score and queues an HSET of average/total only. A concurrent
write to the same hash aborts EXEC and the unit is retried by
run_transaction.
"""

from typing import Any

from pydantic import ValidationError
import redis.asyncio as redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError

from app.errors import RepositoryError, ScoreOutOfRangeError
from app.schemas import Rank, User
from app.stores.redis import (
    COLLECTION_RANKS,
    COLLECTION_USERS,
    document_key,
    run_transaction,
)


def _to_document(entity: Rank | User) -> dict[str, Any]:
    # Unset deletedAt is simply absent from the hash
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


class RedisRankRepository:
    def __init__(self, client: redis.Redis, *, max_attempts: int = 10) -> None:
        self._client = client
        self._max_attempts = max_attempts

    async def get(self, id: str) -> Rank | None:
        key = document_key(COLLECTION_RANKS, id)
        try:
            data = await self._client.hgetall(key)
            return Rank.model_validate(data) if data else None
        except (RedisError, ValidationError) as e:
            raise RepositoryError(f"Failed to read rank {id}") from e

    async def save(self, rank: Rank) -> None:
        stored = rank.model_copy()
        stored.compute_id()
        key = document_key(COLLECTION_RANKS, stored.id)
        try:
            # Overwrite: drop fields of the previous version first
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(key, mapping=_to_document(stored))
                await pipe.execute()
        except RedisError as e:
            raise RepositoryError(f"Failed to save rank {stored.id}") from e

    async def rank(self, id: str, score: float, *, enforce_bounds: bool = False) -> Rank | None:
        key = document_key(COLLECTION_RANKS, id)

        async def apply_score(pipe: Pipeline) -> Rank | None:
            data = await pipe.hgetall(key)
            if not data:
                return None

            rank = Rank.model_validate(data)
            if enforce_bounds and not rank.accepts(score):
                # Nothing queued yet, the pipeline just unwatches
                raise ScoreOutOfRangeError(score, rank.min, rank.max)
            rank.update_score(score)
            pipe.multi()
            pipe.hset(key, mapping={"average": rank.average, "total": rank.total})
            return rank

        try:
            return await run_transaction(
                self._client,
                key,
                apply_score,
                max_attempts=self._max_attempts,
            )
        except (RedisError, ValidationError) as e:
            raise RepositoryError(f"Failed to rank {id}") from e


class RedisUserRepository:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def get(self, id: str) -> User | None:
        key = document_key(COLLECTION_USERS, id)
        try:
            data = await self._client.hgetall(key)
            return User.model_validate(data) if data else None
        except (RedisError, ValidationError) as e:
            raise RepositoryError(f"Failed to read user {id}") from e

    async def save(self, user: User) -> None:
        key = document_key(COLLECTION_USERS, user.id)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(key, mapping=_to_document(user))
                await pipe.execute()
        except RedisError as e:
            raise RepositoryError(f"Failed to save user {user.id}") from e
