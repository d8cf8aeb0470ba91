"""
============================================================================
FILE: logging_config.py
LOCATION: records_api/logging_config.py
============================================================================

PURPOSE:
    Logging for the records API. Every module logs through a child of the
    "records" logger; setup_logging() attaches one stdout handler to it in
    either JSON (one object per line) or console format.

ROLE IN PROJECT:
    Called from the application lifespan and from the seed command with the
    level and format taken from Settings. Synchronizer warnings carry the
    collection and document id as structured context so a partial failure
    can be found in the logs by id.

KEY COMPONENTS:
    - JsonFormatter: one JSON object per record, context merged in
    - ConsoleFormatter: HH:MM:SS [LEVEL] records.<area>: message [k=v ...]
    - setup_logging(level, json_output): configure the "records" logger
    - get_logger(area): child logger such as "records.store"

USAGE:
    from records_api.logging_config import get_logger

    logger = get_logger("relationships")
    logger.warning("Could not add %s", course_id,
                   extra={"context": {"collection": "courses", "id": course_id}})
============================================================================
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

BASE_LOGGER_NAME = "records"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("uvicorn.access", "slowapi")


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable single line, context appended as key=value pairs."""

    FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    def __init__(self):
        super().__init__(self.FORMAT, datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            line = f"{line} [{pairs}]"
        return line


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """
    Configure the "records" logger.

    Args:
        level: Level name; unknown names fall back to INFO
        json_output: JSON lines when True, console lines otherwise

    Returns:
        The configured base logger
    """
    logger = logging.getLogger(BASE_LOGGER_NAME)
    resolved = logging.getLevelName(level.upper())
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else ConsoleFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(area: Optional[str] = None) -> logging.Logger:
    """Child of the "records" logger for one area of the service."""
    base_logger = logging.getLogger(BASE_LOGGER_NAME)
    if area:
        return base_logger.getChild(area)
    return base_logger
