# recordguard/core/audit_log.py
"""
Audit trail for encryption migrations
Events go to the structured log; subclasses may also persist them.
"""
from enum import Enum
from typing import Optional, Dict, Any
import asyncio
import functools

from recordguard.core.logging import logger


class AuditEventType(str, Enum):
    MIGRATION_STARTED = "encryption.migration.started"
    MIGRATION_COMPLETED = "encryption.migration.completed"
    MIGRATION_CANCELLED = "encryption.migration.cancelled"
    RECORD_ENCRYPTED = "encryption.record.encrypted"
    RECORD_FAILED = "encryption.record.failed"


class AuditLogger:
    """Writes audit events as structured log lines.

    ``details`` must only hold counts, field names and record ids.
    Nothing is kept in memory once an event is written.
    """

    def __init__(self, actor: Optional[str] = None):
        self.actor = actor

    async def log_event(self, *, event_type: AuditEventType, family: Optional[str] = None, record_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        """Record an event. Blocking sinks run in the default executor."""
        event = {
            "event_type": event_type.value,
            "actor": self.actor,
            "family": family,
            "record_id": record_id,
            "details": details or {},
        }
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, functools.partial(self.write, event))

    def write(self, event: Dict[str, Any]) -> None:
        """Sink for one event; override to persist events elsewhere"""
        extra = {"event_type": event["event_type"]}
        if event["family"] is not None:
            extra["family"] = event["family"]
        if event["record_id"] is not None:
            extra["record_id"] = event["record_id"]
        logger.info(f"Audit event {event['event_type']}", extra=extra)
