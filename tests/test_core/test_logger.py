"""
Tests for the logging module.

Tests logger setup, configuration, and output handling.
"""

import logging
from pathlib import Path

from knowledge_assistant.core.logger import setup_logging, get_logger, LOG_FILENAME


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_sets_root_level(self, reset_logger_singleton):
        """Test that setup_logging configures the root logger."""
        setup_logging(log_level="DEBUG")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG

    def test_setup_with_file_handler(self, temp_dir: Path, reset_logger_singleton):
        """Test that setup_logging creates file handler when directory provided."""
        logs_dir = temp_dir / "logs"

        setup_logging(
            log_level="INFO",
            logs_directory=logs_dir,
            max_file_size_mb=1,
            backup_count=1
        )

        logger = get_logger("test")
        logger.info("Test message")

        assert (logs_dir / LOG_FILENAME).exists()

    def test_setup_only_runs_once(self, reset_logger_singleton):
        """Test that setup_logging only initializes once."""
        setup_logging(log_level="DEBUG")
        initial_handlers = len(logging.getLogger().handlers)

        setup_logging(log_level="WARNING")

        assert len(logging.getLogger().handlers) == initial_handlers

    def test_http_client_loggers_quieted(self, reset_logger_singleton):
        """Test that SDK transport loggers are held at WARNING or above."""
        setup_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("openai").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_named_logger(self, reset_logger_singleton):
        """Test that get_logger returns a logger with the given name."""
        logger = get_logger("my_module")

        assert logger.name == "my_module"

    def test_get_logger_uses_config(self, configured_db, reset_logger_singleton):
        """Test that get_logger initializes from the loaded config."""
        get_logger("configured").debug("from config")

        assert logging.getLogger().level == logging.DEBUG
        assert (configured_db.paths.logs_directory / LOG_FILENAME).exists()

    def test_multiple_loggers_share_config(self, reset_logger_singleton):
        """Test that multiple loggers share the same configuration."""
        setup_logging(log_level="WARNING")

        _logger1 = get_logger("module1")  # noqa: F841
        _logger2 = get_logger("module2")  # noqa: F841

        assert logging.getLogger().level == logging.WARNING
