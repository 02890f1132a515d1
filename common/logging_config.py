# -*- coding: utf-8 -*-
"""
Centralized logging configuration for the WinGet bootstrapper.

Console output is human-readable; an optional log file receives one JSON
object per record so unattended runs (scheduled tasks, provisioning
pipelines) can be parsed afterwards.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

SERVICE_NAME = "winget-bootstrap"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_RESERVED_RECORD_KEYS = frozenset(
    [
        "name",
        "msg",
        "message",
        "asctime",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON with a consistent structure:
    timestamp (ISO, UTC), level, service, logger, message, source location,
    exception text when present and any `extra=` fields.
    """

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.environ.get(
            "COMPUTERNAME", os.environ.get("HOSTNAME", "unknown")
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "hostname": self.hostname,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(
    verbose: bool = False,
    log_file_path: Optional[str] = None,
    service_name: str = SERVICE_NAME,
) -> logging.Logger:
    """
    Set up logging for a bootstrapper run.

    Args:
        verbose: DEBUG level when True, INFO otherwise. LOG_LEVEL in the
            environment overrides a non-verbose run.
        log_file_path: Optional path for a JSON-lines log file.
        service_name: Name of the returned logger.

    Returns:
        Configured logger instance
    """
    if verbose:
        numeric_level = logging.DEBUG
    else:
        level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
        numeric_level = getattr(logging, level_name, None)
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(service_name)
    logger.debug(
        "Logging initialized",
        extra={
            "log_level": logging.getLevelName(numeric_level),
            "file_enabled": bool(log_file_path),
        },
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    This should be used after setup_logging() has been called.
    """
    return logging.getLogger(name)
