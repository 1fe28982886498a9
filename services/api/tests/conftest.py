"""Shared fixtures: an app wired to in-memory repositories."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import create_app
from app.repositories import Repositories, memory_repositories
from app.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(repository_backend="memory", enforce_score_bounds=False, metrics_enabled=True)


@pytest.fixture
def repositories() -> Repositories:
    return memory_repositories()


@pytest.fixture
async def client(settings: Settings, repositories: Repositories):
    """Create test client.

    ASGITransport does not run the lifespan, so repositories are attached
    to app.state directly.
    """
    app = create_app(settings)
    app.state.repositories = repositories
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
