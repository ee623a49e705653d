"""Logging configuration for spawner-skills."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from spawnerskills.utils.config import Config

LOGGER_NAME = "spawnerskills"
LOG_FILE = "spawnerskills.log"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Server console output, no timestamp
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def setup_logging(config: Config, console_output: bool = False) -> logging.Logger:
    """
    Route the ``spawnerskills`` logger to a rotating file in ``logging_path``.

    Args:
        config: Application configuration
        console_output: Also log to stdout at INFO (used by ``serve``)

    Returns:
        The configured package logger
    """
    level = logging.getLevelName(config.log.level)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    config.logging_path.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.logging_path / LOG_FILE,
        maxBytes=config.log.max_bytes,
        backupCount=config.log.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    package_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(max(level, logging.INFO))
        package_logger.addHandler(console_handler)

    return package_logger
