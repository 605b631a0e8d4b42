import os
from collections.abc import Generator

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import build_conninfo, close_pool, init_pool, is_pool_initialized
from app.database.repositories.records_repository import RecordsRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "expenses_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3):
            pass
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def records_repo(integration_pool: None) -> Generator[RecordsRepository, None, None]:
    assert is_pool_initialized()
    repo = RecordsRepository()
    repo.ensure_schema()
    repo.clear()
    yield repo
    repo.clear()
