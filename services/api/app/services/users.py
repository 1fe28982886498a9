"""User service."""

import logging

from app.repositories import UserRepository
from app.schemas import User

logger = logging.getLogger("uvicorn.error")


async def create_user(repo: UserRepository, *, username: str) -> User:
    """Create a user with a random id."""
    user = User(username=username)
    await repo.save(user)
    logger.info(f"User created: {user.id}")
    return user


async def get_user(repo: UserRepository, *, user_id: str) -> User | None:
    return await repo.get(user_id)
