"""Database infrastructure components."""

from aura.infrastructure.database.connection import Base, DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
]
