"""Tests for logging configuration."""

import logging
from logging.handlers import RotatingFileHandler

import pytest
import structlog

from storybook.config import StorybookSettings, configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging(StorybookSettings())


class TestConfigureLogging:
    """Test handler and level setup."""

    def test_sets_root_level(self):
        configure_logging(StorybookSettings(log_level="DEBUG"))
        assert logging.getLogger().level == logging.DEBUG

    def test_console_handler_uses_stderr(self):
        configure_logging(StorybookSettings())
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "storybook.log"
        configure_logging(StorybookSettings(log_file=log_file, log_level="INFO"))
        assert log_file.parent.is_dir()
        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.INFO

    @pytest.mark.parametrize("log_format", ["console", "json", "structured"])
    def test_formats(self, log_format):
        configure_logging(StorybookSettings(log_format=log_format))
        assert structlog.is_configured()

    def test_rejects_unknown_level(self):
        settings = StorybookSettings.model_construct(log_level="LOUD")
        with pytest.raises(ValueError, match="Invalid log level 'LOUD'"):
            configure_logging(settings)

    def test_records_reach_caplog(self, caplog):
        configure_logging(StorybookSettings(log_level="INFO"))
        # force=True removed the capture handler along with the old ones
        logging.getLogger().addHandler(caplog.handler)
        logger = structlog.get_logger("storybook.tests.logging")
        with caplog.at_level(logging.INFO):
            logger.info("Scene scored", scene=2)
        assert "Scene scored" in caplog.text


class TestGetLogger:
    """Test the cached logger accessor."""

    def test_returns_cached_logger(self):
        assert get_logger("storybook.tests.cached") is get_logger(
            "storybook.tests.cached"
        )
