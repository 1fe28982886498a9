"""Backend selection.

Builds the repositories named by REPOSITORY_BACKEND at startup and owns the
underlying resources (engine, Redis client) until shutdown.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
import logging

from app.repositories.base import RankRepository, UserRepository
from app.repositories.memory import InMemoryRankRepository, InMemoryUserRepository
from app.settings import Settings

logger = logging.getLogger("uvicorn.error")


@dataclass
class Repositories:
    ranks: RankRepository
    users: UserRepository
    backend: str = "memory"
    _closers: list[Callable[[], Awaitable[None]]] = field(default_factory=list, repr=False)

    async def close(self) -> None:
        """Release backend resources (idempotent)."""
        while self._closers:
            closer = self._closers.pop()
            await closer()
        logger.info(f"Repositories closed ({self.backend})")


def memory_repositories() -> Repositories:
    return Repositories(
        ranks=InMemoryRankRepository(),
        users=InMemoryUserRepository(),
        backend="memory",
    )


async def open_repositories(settings: Settings) -> Repositories:
    """Create the repositories for the configured backend.

    Connectivity is checked here so a misconfigured backend fails at startup
    rather than on the first request.
    """
    backend = settings.repository_backend

    if backend == "memory":
        return memory_repositories()

    if backend == "postgres":
        from app.repositories.sql import SqlRankRepository, SqlUserRepository
        from app.stores.postgres import (
            create_engine,
            create_session_factory,
            create_tables,
            ping_db,
        )

        engine = create_engine(settings)
        try:
            await ping_db(engine)
            if settings.database_create_tables:
                await create_tables(engine)
        except Exception:
            await engine.dispose()
            raise
        logger.info("Postgres connected")

        session_factory = create_session_factory(engine)
        return Repositories(
            ranks=SqlRankRepository(
                session_factory,
                max_attempts=settings.transaction_max_attempts,
            ),
            users=SqlUserRepository(session_factory),
            backend=backend,
            _closers=[engine.dispose],
        )

    if backend == "redis":
        from app.repositories.redis import RedisRankRepository, RedisUserRepository
        from app.stores.redis import close_redis, create_redis

        client = await create_redis(settings)

        async def close_client() -> None:
            await close_redis(client)

        return Repositories(
            ranks=RedisRankRepository(
                client,
                max_attempts=settings.transaction_max_attempts,
            ),
            users=RedisUserRepository(client),
            backend=backend,
            _closers=[close_client],
        )

    raise ValueError(f"Unknown repository backend: {backend}")
