"""
Entry Store

Durable storage for completed check-ins.

Write contract:
- create() inserts a new immutable entry
- update() only patches video_ref, and only while it is still null
- delete() removes an entry on explicit user request

Every successful write notifies the registered write listeners
synchronously, before the call returns. The analytics cache uses
this to drop a user's dashboard before the caller sees the result.
"""

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import update as sql_update
from sqlalchemy.exc import SQLAlchemyError

from aura.config.logging_config import get_logger
from aura.domain.exceptions import PersistenceError
from aura.domain.models.entry import Entry
from aura.infrastructure.database.connection import DatabaseManager
from aura.infrastructure.database.models.entry_model import EntryModel
from aura.infrastructure.database.repositories.base import BaseRepository

logger = get_logger(__name__)

WriteListener = Callable[[UUID], None]


class EntryStore(ABC):
    """Abstract entry persistence with synchronous write notification."""

    def __init__(self) -> None:
        self._listeners: list[WriteListener] = []

    def add_write_listener(self, listener: WriteListener) -> None:
        """Register a callback invoked with the user id after each write."""
        self._listeners.append(listener)

    def _notify(self, user_id: UUID) -> None:
        for listener in self._listeners:
            listener(user_id)

    async def create(self, entry: Entry) -> UUID:
        """
        Persist a new entry.

        Returns:
            The entry id

        Raises:
            PersistenceError: If the write fails
        """
        await self._insert(entry)
        self._notify(entry.user_id)
        logger.info("Entry created", entry_id=str(entry.id), user_id=str(entry.user_id))
        return entry.id

    async def update(self, entry_id: UUID, *, video_ref: str) -> Entry:
        """
        Apply the single permitted post-insert patch.

        Raises:
            PersistenceError: If the entry is missing or already has a video
        """
        entry = await self._set_video_ref(entry_id, video_ref)
        self._notify(entry.user_id)
        logger.info("Entry video attached", entry_id=str(entry_id))
        return entry

    async def delete(self, entry_id: UUID, user_id: UUID) -> bool:
        """
        Delete an entry owned by user_id.

        Returns:
            True if an entry was removed
        """
        removed = await self._remove(entry_id, user_id)
        if removed:
            self._notify(user_id)
            logger.info("Entry deleted", entry_id=str(entry_id), user_id=str(user_id))
        return removed

    @abstractmethod
    async def get(self, entry_id: UUID) -> Optional[Entry]:
        pass

    @abstractmethod
    async def query(
        self,
        user_id: UUID,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Entry]:
        """
        Entries for a user, newest first.

        Args:
            user_id: Owning user
            since: Only entries created at or after this time
            limit: Maximum entries to return
        """
        pass

    @abstractmethod
    async def _insert(self, entry: Entry) -> None:
        pass

    @abstractmethod
    async def _set_video_ref(self, entry_id: UUID, video_ref: str) -> Entry:
        pass

    @abstractmethod
    async def _remove(self, entry_id: UUID, user_id: UUID) -> bool:
        pass


class InMemoryEntryStore(EntryStore):
    """Process-local entry store for development and tests."""

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[UUID, Entry] = {}

    async def get(self, entry_id: UUID) -> Optional[Entry]:
        return self._entries.get(entry_id)

    async def query(
        self,
        user_id: UUID,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Entry]:
        entries = [
            e for e in self._entries.values()
            if e.user_id == user_id and (since is None or e.created_at >= since)
        ]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[:limit] if limit is not None else entries

    async def _insert(self, entry: Entry) -> None:
        if entry.id in self._entries:
            raise PersistenceError(f"Entry {entry.id} already exists")
        self._entries[entry.id] = entry

    async def _set_video_ref(self, entry_id: UUID, video_ref: str) -> Entry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise PersistenceError(f"Entry {entry_id} not found")
        if entry.video_ref is not None:
            raise PersistenceError(f"Entry {entry_id} already has a video")
        patched = replace(entry, video_ref=video_ref)
        self._entries[entry_id] = patched
        return patched

    async def _remove(self, entry_id: UUID, user_id: UUID) -> bool:
        entry = self._entries.get(entry_id)
        if entry is None or entry.user_id != user_id:
            return False
        del self._entries[entry_id]
        return True


class SqlAlchemyEntryStore(EntryStore):
    """PostgreSQL-backed entry store."""

    def __init__(self, db: DatabaseManager) -> None:
        super().__init__()
        self._db = db

    async def get(self, entry_id: UUID) -> Optional[Entry]:
        async with self._db.session() as session:
            model = await BaseRepository(EntryModel, session).get_by_id(entry_id)
            return model.to_domain() if model else None

    async def query(
        self,
        user_id: UUID,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Entry]:
        criteria = [EntryModel.user_id == user_id]
        if since is not None:
            criteria.append(EntryModel.created_at >= since)
        async with self._db.session() as session:
            models = await BaseRepository(EntryModel, session).list_where(
                *criteria,
                order_by=EntryModel.created_at.desc(),
                limit=limit,
            )
            return [m.to_domain() for m in models]

    async def _insert(self, entry: Entry) -> None:
        try:
            async with self._db.session() as session:
                await BaseRepository(EntryModel, session).add(EntryModel.from_domain(entry))
        except SQLAlchemyError as e:
            logger.error("Entry insert failed", entry_id=str(entry.id), error=str(e))
            raise PersistenceError("Could not save the check-in") from e

    async def _set_video_ref(self, entry_id: UUID, video_ref: str) -> Entry:
        try:
            async with self._db.session() as session:
                # Conditional update keeps the patch single-shot under concurrency
                result = await session.execute(
                    sql_update(EntryModel)
                    .where(EntryModel.id == entry_id, EntryModel.video_ref.is_(None))
                    .values(video_ref=video_ref)
                )
                model = await BaseRepository(EntryModel, session).get_by_id(entry_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not patch entry {entry_id}") from e

        if model is None:
            raise PersistenceError(f"Entry {entry_id} not found")
        if result.rowcount == 0:
            raise PersistenceError(f"Entry {entry_id} already has a video")
        return model.to_domain()

    async def _remove(self, entry_id: UUID, user_id: UUID) -> bool:
        try:
            async with self._db.session() as session:
                deleted = await BaseRepository(EntryModel, session).delete_where(
                    EntryModel.id == entry_id,
                    EntryModel.user_id == user_id,
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not delete entry {entry_id}") from e
        return deleted > 0
