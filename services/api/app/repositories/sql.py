"""SQL repositories (PostgreSQL in production, SQLite in tests).

rank() is one optimistic transaction: read the row, fold the score in with
Rank.update_score, stage average/total on the row and commit. The UPDATE is
guarded by the row version; losing a race re-runs the whole unit through
run_transaction.
"""

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.errors import RepositoryError, ScoreOutOfRangeError
from app.models import RankRecord, UserRecord
from app.schemas import Rank, User
from app.stores.postgres import run_transaction, session_scope


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_rank(record: RankRecord) -> Rank:
    return Rank(
        id=record.id,
        project_id=record.project_id,
        item_id=record.item_id,
        total=record.total,
        average=record.average,
        min=record.min,
        max=record.max,
        created_at=_as_utc(record.created_at),
        deleted_at=_as_utc(record.deleted_at),
    )


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        created_at=_as_utc(record.created_at),
        deleted_at=_as_utc(record.deleted_at),
    )


class SqlRankRepository:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        max_attempts: int = 10,
    ) -> None:
        self._session_factory = session_factory
        self._max_attempts = max_attempts

    async def get(self, id: str) -> Rank | None:
        try:
            async with session_scope(self._session_factory) as session:
                record = await session.get(RankRecord, id)
                return _to_rank(record) if record else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to read rank {id}") from e

    async def save(self, rank: Rank) -> None:
        rank_id = rank.computed_id

        async def upsert(session: AsyncSession) -> None:
            record = await session.get(RankRecord, rank_id)
            if record is None:
                record = RankRecord(id=rank_id)
                session.add(record)
            record.project_id = rank.project_id
            record.item_id = rank.item_id
            record.total = rank.total
            record.average = rank.average
            record.min = rank.min
            record.max = rank.max
            record.created_at = rank.created_at
            record.deleted_at = rank.deleted_at

        try:
            await run_transaction(
                self._session_factory,
                upsert,
                key=rank_id,
                max_attempts=self._max_attempts,
                # Concurrent creates of the same id: the losers retry as updates
                conflicts=(StaleDataError, IntegrityError),
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save rank {rank_id}") from e

    async def rank(self, id: str, score: float, *, enforce_bounds: bool = False) -> Rank | None:
        async def apply_score(session: AsyncSession) -> Rank | None:
            record = await session.get(RankRecord, id)
            if record is None:
                return None

            rank = _to_rank(record)
            if enforce_bounds and not rank.accepts(score):
                raise ScoreOutOfRangeError(score, rank.min, rank.max)
            rank.update_score(score)
            # Only these two columns (plus version) end up in the UPDATE
            record.average = rank.average
            record.total = rank.total
            return rank

        try:
            return await run_transaction(
                self._session_factory,
                apply_score,
                key=id,
                max_attempts=self._max_attempts,
            )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to rank {id}") from e


class SqlUserRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, id: str) -> User | None:
        try:
            async with session_scope(self._session_factory) as session:
                record = await session.get(UserRecord, id)
                return _to_user(record) if record else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to read user {id}") from e

    async def save(self, user: User) -> None:
        try:
            async with session_scope(self._session_factory) as session:
                await session.merge(
                    UserRecord(
                        id=user.id,
                        username=user.username,
                        created_at=user.created_at,
                        deleted_at=user.deleted_at,
                    )
                )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save user {user.id}") from e
