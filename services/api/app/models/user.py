"""User record."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.stores.postgres import Base


class UserRecord(Base):
    """Registered user."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), index=True)

    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column("deletedAt", DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<UserRecord {self.username}>"
