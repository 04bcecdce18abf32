# recordguard/db/repositories/base.py
from typing import Any, Generic, TypeVar, Type, Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Base repository with the queries the record stores share"""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_ids(self) -> List[Any]:
        """All primary keys, in key order"""
        result = await self.session.execute(
            select(self.model.id).order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def get_by_employee_id(self, employee_id: str) -> Optional[ModelType]:
        """Get the record that belongs to an employee"""
        result = await self.session.execute(
            select(self.model).where(self.model.employee_id == employee_id)
        )
        return result.scalars().first()

    async def update(self, id: Any, obj_in: dict) -> Optional[ModelType]:
        """Update record"""
        await self.session.execute(
            update(self.model).where(self.model.id == id).values(**obj_in)
        )
        await self.session.commit()
        return await self.get(id)
