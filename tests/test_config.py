"""
Tests for configuration helpers.
"""

import pytest

from h2subsidy_api.config import Settings, get_settings, mask_url, normalize_database_url


class TestNormalizeDatabaseUrl:
    """Plain URLs are mapped to the async drivers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("sqlite:///./h2.db", "sqlite+aiosqlite:///./h2.db"),
            ("mysql://u:p@db:3306/h2", "mysql+aiomysql://u:p@db:3306/h2"),
            ("postgres://u:p@db:5432/h2", "postgresql+asyncpg://u:p@db:5432/h2"),
            ("postgresql://u:p@db:5432/h2", "postgresql+asyncpg://u:p@db:5432/h2"),
        ],
    )
    def test_plain_schemes(self, raw, expected):
        assert normalize_database_url(raw) == expected

    def test_explicit_driver_untouched(self):
        url = "mysql+asyncmy://u:p@db/h2"
        assert normalize_database_url(url) == url

    def test_surrounding_whitespace_stripped(self):
        assert normalize_database_url("  sqlite:///x.db\n") == "sqlite+aiosqlite:///x.db"


class TestMaskUrl:
    def test_password_hidden(self):
        assert mask_url("mysql://root:topsecret@db/h2") == "mysql://root:***@db/h2"

    def test_no_password_unchanged(self):
        assert mask_url("sqlite:///./h2.db") == "sqlite:///./h2.db"


class TestSettings:
    """Settings come from the environment."""

    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "PORT", "DB_POOL_SIZE", "BCRYPT_ROUNDS", "API_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 3000
        assert settings.db_pool_size == 10
        assert settings.bcrypt_rounds == 10
        assert settings.api_token is None
        assert settings.database_url.startswith("sqlite")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "mysql://u:p@db/h2")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("DB_POOL_SIZE", "3")
        settings = Settings(_env_file=None)
        assert settings.database_url == "mysql://u:p@db/h2"
        assert settings.port == 8080
        assert settings.db_pool_size == 3

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
