"""Repositories: persistence of users and ranks behind one interface.

Backends:
- memory: dict + asyncio.Lock (default, tests)
- postgres: SQLAlchemy async, optimistic version-checked transactions
- redis: hashes as documents, WATCH/MULTI/EXEC transactions

The SQL and Redis implementations are imported lazily by the factory so
the memory backend runs without a database driver.
"""

from app.repositories.base import RankRepository, UserRepository
from app.repositories.factory import Repositories, memory_repositories, open_repositories
from app.repositories.memory import InMemoryRankRepository, InMemoryUserRepository

__all__ = [
    "RankRepository",
    "UserRepository",
    "Repositories",
    "memory_repositories",
    "open_repositories",
    "InMemoryRankRepository",
    "InMemoryUserRepository",
]
