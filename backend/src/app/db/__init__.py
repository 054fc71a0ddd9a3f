"""Database utilities and models."""

from app.db.base import Base
from app.db.models import User

__all__ = [
    "Base",
    "User",
]
