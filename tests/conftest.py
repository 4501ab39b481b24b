"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator, Generator

import pytest
from fastapi.testclient import TestClient

from chorecal.core.config import Settings
from chorecal.core.db_client import SqliteRecordStore
from chorecal.main import app


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(_env_file=None, sqlite_db_path=str(tmp_path / "chorecal.db"), environment="test")


@pytest.fixture
async def sqlite_store(test_settings: Settings) -> AsyncIterator[SqliteRecordStore]:
    """A SqliteRecordStore on a fresh database file with the schema applied."""
    store = SqliteRecordStore(test_settings.sqlite_db_path)
    await store.init_schema()
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
def test_client(test_settings: Settings, monkeypatch) -> Generator[TestClient]:
    """TestClient running the real application lifespan against the throwaway database."""
    monkeypatch.setattr("chorecal.main.settings", test_settings)
    with TestClient(app) as client:
        yield client
