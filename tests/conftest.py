"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""

import pytest
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from recordguard.core.audit_log import AuditLogger
from recordguard.core.encryption import EncryptionService
from recordguard.db.base import Base
from recordguard.db.repositories.record_store import RecordStore

TEST_MASTER_KEY = bytes(range(32))


class RecordingAuditLogger(AuditLogger):
    """Keeps every event it writes so tests can inspect the trail"""

    def __init__(self, actor: Optional[str] = None):
        super().__init__(actor)
        self.events: List[Dict[str, Any]] = []

    def write(self, event: Dict[str, Any]) -> None:
        self.events.append(event)
        super().write(event)


class InMemoryRecordStore(RecordStore):
    """Dict-backed store that records every write"""

    def __init__(self, records: Dict[str, Dict[str, Any]], employee_index: Optional[Dict[str, str]] = None):
        self.records = records
        self.employee_index = employee_index or {}
        self.updates: List[tuple] = []

    async def list_ids(self) -> List[str]:
        return sorted(self.records)

    async def fetch(self, record_id: str, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        record = self.records.get(record_id)
        if record is None:
            return None
        return {name: record.get(name) for name in fields}

    async def update(self, record_id: str, changes: Dict[str, Any]) -> None:
        self.updates.append((record_id, dict(changes)))
        self.records[record_id].update(changes)

    async def find_by_employee(self, employee_id: str) -> Optional[str]:
        return self.employee_index.get(employee_id)


@pytest.fixture
def master_key() -> bytes:
    return TEST_MASTER_KEY


@pytest.fixture
def service(master_key: bytes) -> EncryptionService:
    return EncryptionService(master_key)


@pytest.fixture
def other_service() -> EncryptionService:
    """Service with an unrelated master key"""
    return EncryptionService(bytes(range(32, 64)))


@pytest.fixture
def audit() -> RecordingAuditLogger:
    return RecordingAuditLogger(actor="test")


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh SQLite database per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'records.db'}",
        poolclass=NullPool,
    )

    # Import all models to ensure they're registered
    from recordguard.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
