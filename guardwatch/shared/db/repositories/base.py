"""Base repository with shared CRUD queries."""

from typing import TypeVar, Generic, Optional, List, Type, Any, Dict

from sqlalchemy import select, delete, func, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Base

T = TypeVar("T", bound=Base)


def row_to_dict(row: Base) -> Dict[str, Any]:
    """Column attributes of an ORM row keyed by attribute name."""
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class Repository(Generic[T]):
    """
    Base repository for a single ORM model keyed by a string id.

    Repositories never commit; the caller owns the session and transaction.
    """

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _base_query(self):
        return select(self.model)

    async def get_by_id(self, id: str) -> Optional[T]:
        """Get entity by ID."""
        query = self._base_query().where(self.model.id == id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_all(self, limit: int = 1000, offset: int = 0) -> List[T]:
        """Get all entities with pagination."""
        query = self._base_query().limit(limit).offset(offset)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def upsert(self, entity: T) -> T:
        """Insert or update an entity by primary key."""
        merged = await self.session.merge(entity)
        await self.session.flush()
        return merged

    async def delete(self, id: str) -> bool:
        """Delete an entity by ID."""
        query = delete(self.model).where(self.model.id == id)
        result = await self.session.execute(query)
        return result.rowcount > 0

    async def count(self) -> int:
        """Get total count of entities."""
        query = select(func.count()).select_from(self.model)
        result = await self.session.execute(query)
        return result.scalar_one()
