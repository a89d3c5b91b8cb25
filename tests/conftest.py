"""
Shared fixtures: every test gets a fresh SQLite database file.
"""

import pytest
from fastapi.testclient import TestClient

from h2subsidy_api.config import get_settings


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """Point the app at a throwaway database and cheap bcrypt rounds."""
    url = f"sqlite:///{tmp_path / 'h2subsidy-test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.delenv("API_TOKEN", raising=False)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest.fixture
def client(database_url):
    """Create test client with the lifespan (schema setup) running."""
    from h2subsidy_api.main import app

    with TestClient(app) as test_client:
        yield test_client
