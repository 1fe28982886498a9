"""Rank record.

Persisted shape of a Rank. The primary key is derived by the application
(project_id + item_id), never generated by the database.

The `version` column is the optimistic concurrency token: every UPDATE is
emitted as `... WHERE id = :id AND version = :old` and bumps it.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.stores.postgres import Base


class RankRecord(Base):
    """Running average score of an item within a project."""

    __tablename__ = "ranks"

    # Derived key: projectId + itemId
    id: Mapped[str] = mapped_column(String(200), primary_key=True)

    project_id: Mapped[str] = mapped_column("projectId", String(100), index=True)
    item_id: Mapped[str] = mapped_column("itemId", String(100))

    # Running average
    total: Mapped[int] = mapped_column(Integer, default=0)
    average: Mapped[float] = mapped_column(default=0.0)

    # Scale bounds (e.g. 1-5, 0-20)
    min: Mapped[float] = mapped_column()
    max: Mapped[float] = mapped_column()

    # Timestamps
    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column("deletedAt", DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<RankRecord {self.id} avg={self.average} n={self.total}>"
