"""Logging configuration and default sinks for opqueue."""

import logging
from collections.abc import Callable
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from opqueue.core.config.models import LoggingConfig

QUEUE_LOGGER_NAME = "opqueue.queue"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    directory: str | Path | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure root logger with a console handler and an optional rotating file.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        directory: Directory for ``opqueue.log``; console only when None.
        max_size_mb: Maximum size in MB before rotation.
        backup_count: Number of backup files to keep.
    """
    numeric_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if directory is not None:
        log_dir = Path(directory)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "opqueue.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.info(f"Logging initialized: level={level}, directory={directory}")


def configure_logging(config: LoggingConfig) -> None:
    """Apply the ``logging`` section of a loaded Config via setup_logging()."""
    setup_logging(
        level=config.level,
        directory=config.directory,
        max_size_mb=config.max_size_mb,
        backup_count=config.backup_count,
    )


def get_queue_logger(namespace: str | None = None) -> logging.Logger:
    """Get the logger used by a queue's default sinks.

    Returns:
        ``opqueue.queue`` or ``opqueue.queue.<namespace>``.
    """
    if namespace:
        return logging.getLogger(f"{QUEUE_LOGGER_NAME}.{namespace}")
    return logging.getLogger(QUEUE_LOGGER_NAME)


def default_log_sink(namespace: str | None = None) -> Callable[[Any], None]:
    """Trace sink writing to the queue logger at INFO."""
    queue_logger = get_queue_logger(namespace)

    def log(message: Any) -> None:
        queue_logger.info("%s", message)

    return log


def default_logerr_sink(namespace: str | None = None) -> Callable[[Any], None]:
    """Error sink writing to the queue logger at ERROR, with the cause traceback."""
    queue_logger = get_queue_logger(namespace)

    def logerr(error: Any) -> None:
        cause = getattr(error, "cause", None)
        exc_info = cause if isinstance(cause, BaseException) else None
        queue_logger.error("%s", error, exc_info=exc_info)

    return logerr
