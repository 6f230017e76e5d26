"""Repository implementations for data access."""

from aura.infrastructure.database.repositories.base import BaseRepository
from aura.infrastructure.database.repositories.crisis_flag_store import (
    CrisisFlagStore,
    InMemoryCrisisFlagStore,
    SqlAlchemyCrisisFlagStore,
)
from aura.infrastructure.database.repositories.entry_store import (
    EntryStore,
    InMemoryEntryStore,
    SqlAlchemyEntryStore,
    WriteListener,
)

__all__ = [
    "BaseRepository",
    "CrisisFlagStore",
    "EntryStore",
    "InMemoryCrisisFlagStore",
    "InMemoryEntryStore",
    "SqlAlchemyCrisisFlagStore",
    "SqlAlchemyEntryStore",
    "WriteListener",
]
