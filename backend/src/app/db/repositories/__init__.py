"""Repository pattern implementations for database operations."""

from app.db.repositories.base import BaseRepository
from app.db.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
