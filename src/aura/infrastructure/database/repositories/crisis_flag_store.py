"""
Crisis Flag Store

Monitoring records written by the crisis gate. Writes are
best-effort and happen off the check-in's control path.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from aura.domain.exceptions import PersistenceError
from aura.domain.models.entry import CrisisFlag
from aura.infrastructure.database.connection import DatabaseManager
from aura.infrastructure.database.models.crisis_flag_model import CrisisFlagModel
from aura.infrastructure.database.repositories.base import BaseRepository


class CrisisFlagStore(ABC):
    """Abstract crisis flag persistence."""

    @abstractmethod
    async def add(self, flag: CrisisFlag) -> None:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: UUID, limit: int = 10) -> list[CrisisFlag]:
        """Newest flags first."""
        pass


class InMemoryCrisisFlagStore(CrisisFlagStore):
    def __init__(self) -> None:
        self._flags: list[CrisisFlag] = []

    async def add(self, flag: CrisisFlag) -> None:
        self._flags.append(flag)

    async def list_for_user(self, user_id: UUID, limit: int = 10) -> list[CrisisFlag]:
        flags = [f for f in self._flags if f.user_id == user_id]
        flags.sort(key=lambda f: f.flagged_at, reverse=True)
        return flags[:limit]


class SqlAlchemyCrisisFlagStore(CrisisFlagStore):
    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def add(self, flag: CrisisFlag) -> None:
        try:
            async with self._db.session() as session:
                await BaseRepository(CrisisFlagModel, session).add(CrisisFlagModel.from_domain(flag))
        except SQLAlchemyError as e:
            raise PersistenceError("Could not record crisis flag") from e

    async def list_for_user(self, user_id: UUID, limit: int = 10) -> list[CrisisFlag]:
        async with self._db.session() as session:
            models = await BaseRepository(CrisisFlagModel, session).list_where(
                CrisisFlagModel.user_id == user_id,
                order_by=CrisisFlagModel.flagged_at.desc(),
                limit=limit,
            )
            return [m.to_domain() for m in models]
