"""FastAPI dependencies.

Repositories live on app.state (set by the lifespan), never in module globals.
"""

from fastapi import Request

from app.repositories import RankRepository, Repositories, UserRepository
from app.settings import Settings, get_settings


def get_repositories(request: Request) -> Repositories:
    repositories: Repositories | None = getattr(request.app.state, "repositories", None)
    if repositories is None:
        raise RuntimeError("Repositories not initialized. Is the app lifespan running?")
    return repositories


def get_rank_repository(request: Request) -> RankRepository:
    return get_repositories(request).ranks


def get_user_repository(request: Request) -> UserRepository:
    return get_repositories(request).users


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()
