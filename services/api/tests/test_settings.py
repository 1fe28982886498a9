import pytest
from pydantic import ValidationError

from app.settings import Settings


def test_defaults_use_memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REPOSITORY_BACKEND", raising=False)
    settings = Settings(_env_file=None)
    assert settings.repository_backend == "memory"
    assert settings.port == 3000
    assert settings.enforce_score_bounds is False
    assert settings.transaction_max_attempts == 10


def test_backend_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPOSITORY_BACKEND", "redis")
    monkeypatch.setenv("TRANSACTION_MAX_ATTEMPTS", "3")
    settings = Settings(_env_file=None)
    assert settings.repository_backend == "redis"
    assert settings.transaction_max_attempts == 3


def test_unknown_backend_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, repository_backend="firestore")


def test_async_database_url_rewrites_driver() -> None:
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db:5432/ranks")
    assert settings.async_database_url == "postgresql+asyncpg://u:p@db:5432/ranks"


def test_railway_internal_host_disables_ssl() -> None:
    settings = Settings(_env_file=None, database_url="postgresql://u:p@postgres.railway.internal:5432/r")
    assert settings.asyncpg_connect_args == {"ssl": False, "timeout": 20}


def test_sqlite_url_has_no_connect_args() -> None:
    settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///ranks.db")
    assert settings.async_database_url == "sqlite+aiosqlite:///ranks.db"
    assert settings.asyncpg_connect_args == {}
