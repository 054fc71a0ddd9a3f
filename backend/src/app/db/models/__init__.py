"""SQLAlchemy models for the users service."""

from app.db.models.user import User

__all__ = [
    "User",
]
