"""Shared fixtures."""

import pytest

from devlog.adapters.sql_store import SqlStore
from devlog.core.models import Sprint


@pytest.fixture
def store(tmp_path):
    """A fresh store in a temporary directory, seeded with default categories."""
    s = SqlStore.open(tmp_path / "daily-updates.sqlite")
    yield s
    s.close()


@pytest.fixture
def make_sprint():
    """Factory for Sprint values with explicit creation times."""

    def _make(
        id: str,
        code: str = "",
        name: str = "",
        start_date: str = "2024-01-01",
        end_date: str | None = "2024-01-14",
        created_at: str = "2024-01-01T00:00:00+00:00",
    ) -> Sprint:
        return Sprint(
            id=id,
            code=code,
            name=name,
            start_date=start_date,
            end_date=end_date,
            created_at=created_at,
        )

    return _make
