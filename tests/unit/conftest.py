"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient

from chorecal.core.recurrence import create_recurrence_rule
from chorecal.domain.chore import Chore, RecurrenceSpec, RecurrenceType
from chorecal.interface.deps import get_store
from chorecal.main import app
from tests.unit.mocks import InMemoryDBClient


TIMESTAMP = "2026-01-01T00:00:00Z"


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def make_chore() -> Callable[..., Chore]:
    """Build a one-off chore; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> Chore:
        fields: dict[str, Any] = {
            "id": "chore-1",
            "title": "Take out trash",
            "description": "Bins go out before 8am",
            "assignee_id": "tm-1",
            "due_date": date(2026, 1, 20),
            "created_at": TIMESTAMP,
            "updated_at": TIMESTAMP,
        }
        fields.update(overrides)
        return Chore(**fields)

    return _make


@pytest.fixture
def make_anchor(make_chore) -> Callable[..., Chore]:
    """Build an anchor chore whose rule is derived from ``spec`` and its due date (daily by default)."""

    def _make(spec: RecurrenceSpec | None = None, **overrides: Any) -> Chore:
        spec = spec or RecurrenceSpec(type=RecurrenceType.DAILY)
        overrides.setdefault("id", "chore-parent-123")
        overrides.setdefault("due_date", date(2026, 1, 20))
        return make_chore(recurrence=create_recurrence_rule(spec, overrides["due_date"]), **overrides)

    return _make


@pytest.fixture
def api_client(in_memory_db) -> Iterator[TestClient]:
    """TestClient whose routes read and write the in-memory store."""
    app.dependency_overrides[get_store] = lambda: in_memory_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
