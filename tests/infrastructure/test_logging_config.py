"""Tests for logging configuration."""

import logging
from collections.abc import Generator

import pytest
import structlog

from shopcatalog.infrastructure.logging_config import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configures_structlog(self) -> None:
        """structlog is configured with a stdlib logger factory."""
        configure_logging("DEBUG", json_output=True)

        assert structlog.is_configured()
        config = structlog.get_config()
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self) -> None:
        """Console output can replace JSON."""
        configure_logging("INFO", json_output=False)

        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_logs_through_stdlib(self, caplog: pytest.LogCaptureFixture) -> None:
        """Events reach the standard library logging handlers."""
        configure_logging("INFO", json_output=True)
        logger = structlog.get_logger("shopcatalog.test")

        with caplog.at_level(logging.INFO, logger="shopcatalog.test"):
            logger.info("Product created", product_id="p-1")

        assert "Product created" in caplog.text
        assert "p-1" in caplog.text
