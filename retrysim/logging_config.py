"""Logging configuration utilities for retrysim.

retrysim is silent by default (NullHandler on the ``retrysim`` logger).
Call one of the functions below to see what a run is doing.

Example usage:
    import retrysim

    # Console logging, including per-request detail
    retrysim.enable_console_logging(level="DEBUG")

    # Rotating file logging
    retrysim.enable_file_logging("logs/retrysim.log", max_bytes=10_000_000)

    # JSON lines on stderr, virtual time included as "sim_time"
    retrysim.enable_json_logging()

    # Configure from environment variables
    retrysim.configure_from_env()

Environment variables:
    RS_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    RS_LOG_FILE: Path to log file (enables rotating file logging)
    RS_LOG_JSON: Set to "1" for JSON output

Records emitted by the Simulation carry the virtual clock as the
``sim_time`` attribute. Use ``SIM_FORMAT`` to show it in plain-text output.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIM_FORMAT = "%(asctime)s - [t=%(sim_time)sms] %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "retrysim"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class SimTimeFilter(logging.Filter):
    """Gives every record a ``sim_time`` attribute so SIM_FORMAT never fails.

    Records logged without ``extra={"sim_time": ...}`` get ``"-"``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "sim_time"):
            record.sim_time = "-"
        return True


class JsonFormatter(logging.Formatter):
    """Formats log records as one JSON object per line.

    Example output:
        {"timestamp": "2024-01-15T10:30:00.123456+00:00", "level": "INFO",
         "logger": "retrysim.core.simulation", "message": "Simulation started ...",
         "sim_time": 0.0}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        sim_time = getattr(record, "sim_time", None)
        if sim_time is not None and sim_time != "-":
            log_data["sim_time"] = sim_time

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _get_level(level: str | int) -> int:
    """Convert a level string or int to a logging level constant."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    """Get the retrysim root logger."""
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    """Remove and close all handlers from the retrysim logger except NullHandler."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def _attach(handler: logging.Handler, level: LogLevel | int) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    handler.addFilter(SimTimeFilter())
    logger.addHandler(handler)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Enable console (stderr) logging for retrysim.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or int.
        format: Log message format string. Pass ``SIM_FORMAT`` to include
            the virtual time.
        date_format: Date format string for %(asctime)s.

    Returns:
        The created StreamHandler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> RotatingFileHandler:
    """Enable rotating file logging for retrysim.

    Long scenario sweeps at DEBUG produce a lot of output, so the file is
    rotated once it reaches ``max_bytes``; up to ``backup_count`` old files
    are kept.

    Args:
        path: Path to the log file. Parent directories are created automatically.
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or int.
        max_bytes: Maximum size of each log file in bytes. Default 10 MB.
        backup_count: Number of backup files to keep. Default 5.
        format: Log message format string.
        date_format: Date format string for %(asctime)s.

    Returns:
        The created RotatingFileHandler.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_json_logging(
    level: LogLevel | int = "INFO",
    path: str | Path | None = None,
) -> logging.Handler:
    """Enable JSON logging to stderr, or to a rotating file when ``path`` is given.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or int.
        path: Optional log file path.

    Returns:
        The created handler with JsonFormatter.
    """
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            path, maxBytes=DEFAULT_MAX_BYTES, backupCount=DEFAULT_BACKUP_COUNT
        )
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    _attach(handler, level)
    return handler


def configure_from_env() -> None:
    """Configure logging from RS_LOGGING, RS_LOG_FILE and RS_LOG_JSON.

    If neither RS_LOGGING nor RS_LOG_FILE is set, this function does nothing.
    """
    level = os.environ.get("RS_LOGGING", "").upper()
    log_file = os.environ.get("RS_LOG_FILE", "")
    use_json = os.environ.get("RS_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if use_json:
        enable_json_logging(level=level, path=log_file or None)
    elif log_file:
        enable_file_logging(log_file, level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Set the global log level for retrysim."""
    _get_logger().setLevel(_get_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Set the log level for one retrysim submodule.

    Example:
        >>> retrysim.enable_console_logging(level="INFO")
        >>> retrysim.set_module_level("components.request", "DEBUG")
    """
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove all handlers and silence retrysim completely."""
    logger = _get_logger()
    _clear_handlers()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
