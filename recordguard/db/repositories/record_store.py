# recordguard/db/repositories/record_store.py
"""
Record stores used by the encryption migration.

A store exposes one record family as plain dicts so the migration
driver never holds an ORM session across records.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from sqlalchemy.ext.asyncio import AsyncSession

from recordguard.db.repositories.base import BaseRepository


class RecordStore(ABC):
    """Read and update one family of persisted records"""

    @abstractmethod
    async def list_ids(self) -> List[str]:
        """Ids of every record in the family"""

    @abstractmethod
    async def fetch(self, record_id: str, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        """Current values of ``fields`` for one record, or None if it is gone"""

    @abstractmethod
    async def update(self, record_id: str, changes: Dict[str, Any]) -> None:
        """Write ``changes`` to one record in a single statement"""

    @abstractmethod
    async def find_by_employee(self, employee_id: str) -> Optional[str]:
        """Id of the employee's record in this family"""


class SqlAlchemyRecordStore(RecordStore):
    """RecordStore backed by an ORM model; one short session per call"""

    def __init__(self, session_factory: Callable[[], AsyncSession], model: Type[Any]):
        self.session_factory = session_factory
        self.model = model

    async def list_ids(self) -> List[str]:
        async with self.session_factory() as session:
            return await BaseRepository(self.model, session).get_ids()

    async def fetch(self, record_id: str, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as session:
            row = await BaseRepository(self.model, session).get(record_id)
            if row is None:
                return None
            return {name: getattr(row, name) for name in fields}

    async def update(self, record_id: str, changes: Dict[str, Any]) -> None:
        async with self.session_factory() as session:
            await BaseRepository(self.model, session).update(record_id, changes)

    async def find_by_employee(self, employee_id: str) -> Optional[str]:
        async with self.session_factory() as session:
            row = await BaseRepository(self.model, session).get_by_employee_id(employee_id)
            return row.id if row is not None else None
