from __future__ import annotations

import pytest

from fakes import FakeDB
from rundown.core.config import Settings
from rundown.db.facts import FactStore
from rundown.db.summaries import SummaryStore


@pytest.fixture
def fake_db() -> FakeDB:
    return FakeDB()


@pytest.fixture
def summary_store(fake_db: FakeDB) -> SummaryStore:
    return SummaryStore(fake_db)


@pytest.fixture
def fact_store(fake_db: FakeDB) -> FactStore:
    return FactStore(fake_db)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        GITHUB_TOKEN="gh-token",
        GEMINI_API_KEY=None,
        SONARCLOUD_TOKEN="sonar-token",
        CATALOG_BASE_URL="http://catalog.test/api/catalog",
    )
