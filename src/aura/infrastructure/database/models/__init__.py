"""Database ORM models package."""

from aura.infrastructure.database.models.crisis_flag_model import CrisisFlagModel
from aura.infrastructure.database.models.entry_model import EntryModel

__all__ = [
    "CrisisFlagModel",
    "EntryModel",
]
