"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from inboxhook.config.settings import LoggingConfig
from inboxhook.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    for name in ("inboxhook", "uvicorn"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_defaults(self) -> None:
        setup_logging()
        logger = logging.getLogger("inboxhook")
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1

    def test_repeated_calls_do_not_duplicate_handlers(self) -> None:
        setup_logging(LoggingConfig(level="DEBUG"))
        setup_logging(LoggingConfig(level="DEBUG"))
        for name in ("inboxhook", "uvicorn"):
            logger = logging.getLogger(name)
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1

    def test_uvicorn_shares_handlers(self) -> None:
        setup_logging(LoggingConfig(level="WARNING"))
        app_logger = logging.getLogger("inboxhook")
        server_logger = logging.getLogger("uvicorn")
        assert server_logger.handlers == app_logger.handlers
        assert server_logger.level == logging.WARNING

    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "inboxhook.log"
        setup_logging(LoggingConfig(file=str(log_file)))
        logging.getLogger("inboxhook.test").info("hello from test")
        logging.getLogger("uvicorn.access").info("GET /health 200")
        for handler in logging.getLogger("inboxhook").handlers:
            handler.flush()
        text = log_file.read_text()
        assert "hello from test" in text
        assert "GET /health 200" in text
