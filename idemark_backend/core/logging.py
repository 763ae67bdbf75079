# Idemark v1.0.0 - Logging Configuration
"""
Centralized logging configuration with JSON structured logging support.
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from idemark_backend.core.config import get_settings

SERVICE_NAME = "idemark"
SERVICE_VERSION = "1.0.0"

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")

# Keys an import attaches to its log records through ``extra``.
IMPORT_CONTEXT_FIELDS = ("import_url", "strategy", "stage", "error_code")
CONTEXT_PLACEHOLDER = "-"


class ImportContextFilter(logging.Filter):
    """Give every record the import context keys so formatters can rely on them."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in IMPORT_CONTEXT_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, CONTEXT_PLACEHOLDER)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that stamps every record with service metadata.

    Import context passed through ``extra`` is written as top-level string
    keys; placeholders set by ImportContextFilter are left out.
    """

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["service"] = SERVICE_NAME
        log_record["version"] = SERVICE_VERSION

        for key in IMPORT_CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is None or value == CONTEXT_PLACEHOLDER:
                log_record.pop(key, None)
            else:
                # Enum members are written as their plain value.
                log_record[key] = str(getattr(value, "value", value))

        if "message" not in log_record and record.getMessage():
            log_record["message"] = record.getMessage()


def setup_logging(
    level: str | None = None,
    log_format: str | None = None
) -> logging.Logger:
    """
    Set up application logging with JSON or text format.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings value.
        log_format: Log format ('json' or 'text'). Defaults to settings value.

    Returns:
        Configured root logger.
    """
    settings = get_settings()

    level = level or settings.log_level
    log_format = log_format or settings.log_format
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)

    if log_format.lower() == "json":
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            timestamp=True
        )
    else:
        formatter = logging.Formatter(
            fmt=(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | "
                "[%(strategy)s %(stage)s] %(message)s"
            ),
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.addFilter(ImportContextFilter())
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def truncate(text: str, limit: int = 300) -> str:
    """Shorten untrusted upstream text before it reaches the logs."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
