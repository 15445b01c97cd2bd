"""
Logging configuration and utilities.

Console output goes to stderr so command output on stdout stays clean. The
optional log file rotates by size.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from cat_weight_ledger.utils.exceptions import ConfigurationError
from cat_weight_ledger.utils.parameters import LoggingConfig


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown logging level: {name}")
    return level


def _replace_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: LoggingConfig, logger_name: str | None = None) -> logging.Logger:
    """
    Configure the application logger from the logging section.

    Calling it again (e.g. once per CLI invocation) replaces the previous
    handlers instead of stacking them.

    Args:
        config: Logging configuration.
        logger_name: Logger to configure, usually the package name. None
            configures the root logger.

    Returns:
        Configured logger.

    Raises:
        ConfigurationError: If the level name is unknown.
    """
    level = _resolve_level(config.level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    _replace_handlers(logger)

    formatter = logging.Formatter(config.format)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
