"""Repository interfaces.

Business code depends on these protocols only; the concrete backend
(in-memory, SQL, Redis) is chosen at startup.

Contract shared by every backend:
- get() returns None when the record does not exist
- save() is an upsert keyed by the derived/generated id, last write wins
- rank() applies a score atomically and returns the updated Rank, or None
  when the item does not exist (nothing is created in that case); with
  enforce_bounds it raises ScoreOutOfRangeError, checked against the
  bounds read in the same atomic unit, and leaves the record unchanged
- backend failures raise RepositoryError

Backend resources (engine, client) are owned by the factory, not by the
repositories.
"""

from typing import Protocol

from app.schemas import Rank, User


class RankRepository(Protocol):
    async def get(self, id: str) -> Rank | None: ...

    async def save(self, rank: Rank) -> None: ...

    async def rank(self, id: str, score: float, *, enforce_bounds: bool = False) -> Rank | None: ...


class UserRepository(Protocol):
    async def get(self, id: str) -> User | None: ...

    async def save(self, user: User) -> None: ...
