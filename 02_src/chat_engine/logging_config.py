"""JSON logging for the chat exchange engine.

Each record is written as one JSON object per line. Exchange code logs
with ``extra={"context": {...}}``; a ``request_id`` in that context is
lifted to the top level so one exchange can be followed across lines.
"""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import resolve_log_path

ENGINE_LOGGER = "chat_engine"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "context", None)
        if context is not None:
            if isinstance(context, dict) and "request_id" in context:
                entry["request_id"] = context["request_id"]
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Context may carry datetimes or enums
        return json.dumps(entry, ensure_ascii=False, default=str)


def build_logging_config(level: str, log_file: Path, debug: bool = False) -> dict:
    """dictConfig schema: JSON to stdout and to a rotating file."""
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": f"{__name__}.JSONFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(log_file),
                "maxBytes": LOG_FILE_MAX_BYTES,
                "backupCount": LOG_FILE_BACKUPS,
                "encoding": "utf-8",
                "formatter": "json",
            },
        },
        "root": {"level": level, "handlers": ["console", "file"]},
    }
    if debug:
        # Engine internals only; third-party loggers keep the root level
        config["loggers"] = {ENGINE_LOGGER: {"level": "DEBUG"}}
    return config


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    debug: bool = False,
) -> None:
    """
    Configure logging for the engine and its HTTP adapter.

    Args:
        log_level: Root level name. Defaults to the LOG_LEVEL env var or INFO.
        log_file: Log file path. Defaults to LOG_FILE or 04_logs/app.log.
        debug: Turn on DEBUG for the ``chat_engine`` loggers (CHAT_ENGINE_DEBUG).
    """
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    path = Path(log_file) if log_file else resolve_log_path(os.getenv("LOG_FILE"))
    path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(level, path, debug))


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)
