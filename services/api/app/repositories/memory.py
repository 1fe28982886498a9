"""In-memory repositories.

One dict per resource guarded by a single asyncio.Lock: every key shares
the lock, so rank() calls on different ids are serialized too. Used as the
default backend for local runs and as the reference in tests.

Entities are copied on the way in and out; callers never hold a reference
into the shared map.
"""

import asyncio

from app.errors import ScoreOutOfRangeError
from app.schemas import Rank, User


class InMemoryRankRepository:
    def __init__(self) -> None:
        self._ranks: dict[str, Rank] = {}
        self._lock = asyncio.Lock()

    async def get(self, id: str) -> Rank | None:
        async with self._lock:
            rank = self._ranks.get(id)
            return rank.model_copy(deep=True) if rank else None

    async def save(self, rank: Rank) -> None:
        stored = rank.model_copy(deep=True)
        stored.compute_id()
        async with self._lock:
            self._ranks[stored.id] = stored

    async def rank(self, id: str, score: float, *, enforce_bounds: bool = False) -> Rank | None:
        async with self._lock:
            rank = self._ranks.get(id)
            if rank is None:
                return None
            if enforce_bounds and not rank.accepts(score):
                raise ScoreOutOfRangeError(score, rank.min, rank.max)
            rank.update_score(score)
            return rank.model_copy(deep=True)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def get(self, id: str) -> User | None:
        async with self._lock:
            user = self._users.get(id)
            return user.model_copy(deep=True) if user else None

    async def save(self, user: User) -> None:
        async with self._lock:
            self._users[user.id] = user.model_copy(deep=True)
