"""
Centralized logging setup for the Knowledge Assistant.

Console output plus a rotating log file, configured from config.json.
A module-level guard keeps handlers from being installed twice.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILENAME = "knowledge_assistant.log"

# HTTP client chatter from the OpenAI SDK drowns out our own messages at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_logger_initialized = False


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    logs_directory: Path = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5
) -> None:
    """
    Initialize the root logger with console and optional file handlers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string for log messages.
        logs_directory: Directory for log files. If None, file logging disabled.
        max_file_size_mb: Maximum size of each log file in MB.
        backup_count: Number of rotated files to keep.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if logs_directory:
        logs_directory = Path(logs_directory)
        logs_directory.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            logs_directory / LOG_FILENAME,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _logger_initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger, initializing logging from config on first use.

    Falls back to console-only defaults when no config file can be found,
    so importing a module never fails because of logging.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Logger instance.
    """
    if not _logger_initialized:
        from .config_loader import get_config
        from .exceptions import ConfigurationError

        try:
            config = get_config()
        except ConfigurationError:
            setup_logging()
        else:
            setup_logging(
                log_level=config.logging.level,
                log_format=config.logging.format,
                logs_directory=config.paths.logs_directory,
                max_file_size_mb=config.logging.max_file_size_mb,
                backup_count=config.logging.backup_count
            )

    return logging.getLogger(name)


if __name__ == "__main__":
    setup_logging(log_level="DEBUG")

    logger = get_logger(__name__)
    logger.debug("Debug message")
    logger.info("Info message")
    logger.warning("Warning message")

    get_logger("openai").info("Suppressed below WARNING")
