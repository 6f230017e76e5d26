"""
Base Repository Pattern

Generic async data access shared by the SQLAlchemy-backed stores.
Repositories operate on a session they are handed; transaction
boundaries belong to the caller.
"""

from typing import Generic, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aura.infrastructure.database.connection import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic async CRUD over one ORM model.

    Usage:
        repo = BaseRepository(EntryModel, session)
        model = await repo.get_by_id(entry_id)
    """

    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        self._model = model
        self._session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        result = await self._session.execute(
            select(self._model).where(self._model.id == id)
        )
        return result.scalar_one_or_none()

    async def add(self, instance: ModelT) -> ModelT:
        """
        Insert a new row.

        Args:
            instance: ORM instance to insert

        Returns:
            The flushed instance
        """
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete_where(self, *criteria) -> int:
        """
        Delete rows matching all criteria.

        Returns:
            Number of rows deleted
        """
        result = await self._session.execute(delete(self._model).where(*criteria))
        return result.rowcount

    async def list_where(
        self,
        *criteria,
        order_by=None,
        limit: Optional[int] = None,
    ) -> Sequence[ModelT]:
        query = select(self._model).where(*criteria)
        if order_by is not None:
            query = query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)
        result = await self._session.execute(query)
        return result.scalars().all()
