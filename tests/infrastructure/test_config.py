"""Tests for application settings."""

from unittest.mock import patch

from shopcatalog.infrastructure.config import Settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_settings(self) -> None:
        """Defaults apply when the environment is empty."""
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)
            assert settings.database_url.startswith("postgresql+asyncpg://")
            assert settings.log_level == "INFO"
            assert settings.log_json is True
            assert settings.debug is False

    def test_settings_from_env(self) -> None:
        """Environment variables override defaults."""
        env_vars = {
            "DATABASE_URL": "sqlite+aiosqlite:///catalog.db",
            "LOG_LEVEL": "DEBUG",
            "LOG_JSON": "false",
            "DEBUG": "true",
        }
        with patch.dict("os.environ", env_vars, clear=False):
            settings = Settings(_env_file=None)
            assert settings.database_url == "sqlite+aiosqlite:///catalog.db"
            assert settings.log_level == "DEBUG"
            assert settings.log_json is False
            assert settings.debug is True
