# recordguard/core/logging.py
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Any
from pythonjsonlogger.json import JsonFormatter

from recordguard.core.config import settings

# Extras copied onto the JSON record when a caller passes them
CONTEXT_FIELDS = ("family", "record_id", "field", "purpose", "event_type")


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if record.name:
            log_record["logger"] = record.name

        log_record["level"] = record.levelname

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_record[name] = getattr(record, name)


def setup_logging(level: str = "INFO", stream=None) -> logging.Logger:
    """Configure structured JSON logging"""
    logger = logging.getLogger("recordguard")
    logger.setLevel(level)
    logger.propagate = False

    # Re-running setup replaces the handler instead of stacking a second one
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(message)s"
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


# Initialize logger
logger = setup_logging(settings.LOG_LEVEL)
