"""Centralized logging configuration for the triage pipeline."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

# Record attributes passed via ``extra=`` that JSON output carries through.
CONTEXT_FIELDS = ("email_id", "kind", "step")

NOISY_LOGGERS = ("googleapiclient", "google.auth", "urllib3", "openai", "httpx")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line (NDJSON).

    Fields: timestamp, level, logger, thread, message, any of
    ``CONTEXT_FIELDS`` present on the record, and optionally exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level_override: Optional[str] = None) -> None:
    """Configure the root logger from the environment.

    Args:
        level_override: If set, takes precedence over LOG_LEVEL.

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Unknown values mean INFO.
        LOG_FORMAT: "json" for JSON lines, anything else for text.
    """
    level_name = (level_override or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO

    log_format = os.getenv("LOG_FORMAT", "text").lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
