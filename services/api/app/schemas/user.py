"""User entity and request payloads for /users."""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


def generate_user_id() -> str:
    """Generate an opaque random user ID."""
    return uuid4().hex


class User(BaseModel):
    """A registered user."""

    id: str = Field(default_factory=generate_user_id)
    username: str
    created_at: datetime = Field(
        alias="createdAt",
        default_factory=lambda: datetime.now(timezone.utc),
    )
    deleted_at: datetime | None = Field(alias="deletedAt", default=None)

    model_config = {"populate_by_name": True}


class CreateUserRequest(BaseModel):
    """Request body for POST /users."""

    username: str = Field(min_length=1, max_length=100)
