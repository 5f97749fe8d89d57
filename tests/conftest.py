"""Root test configuration."""

import logging

import pytest
import structlog

from runstamp.config import get_settings


def _configure_test_logging():
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    _configure_test_logging()


@pytest.fixture(autouse=True)
def _isolated_settings_and_logging():
    """Reset cached settings and logging configuration around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    _configure_test_logging()
