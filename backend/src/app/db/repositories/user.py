"""Repository for User entities."""

from __future__ import annotations

from typing import Optional
from typing import Sequence

from sqlalchemy.orm import Session

from app.api.schemas import UserCreate
from app.api.schemas import UserUpdate
from app.db.models import User
from app.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User CRUD operations.

    All statements are built with SQLAlchemy constructs, so values are
    always sent as bound parameters.
    """

    def __init__(self, session: Session):
        """Initialize the repository.

        Args:
            session: SQLAlchemy session for database operations.
        """
        super().__init__(session, User)

    def create(self, fields: UserCreate) -> User:
        """Insert a new user.

        Raises:
            ValidationError: If the email or subject id is already taken.
        """
        user = User(
            cognito_sub=fields.cognito_sub,
            username=fields.username,
            email=fields.email,
            role=fields.role,
            phone_number=fields.phone_number,
        )
        return self.add(user)

    def list(self) -> Sequence[User]:
        """Return every user ordered by ascending id."""
        return self.get_all()

    def update(self, user_id: int, fields: UserUpdate) -> Optional[User]:
        """Overwrite all mutable fields of a user.

        This is a full replacement, not a patch: an omitted phone number
        clears the stored one. The subject id is never changed.

        Returns:
            The updated user, or None if no user has this id.

        Raises:
            ValidationError: If the new email belongs to another user.
        """
        user = self.get_by_id(user_id)
        if user is None:
            return None
        user.username = fields.username
        user.email = fields.email
        user.role = fields.role
        user.phone_number = fields.phone_number
        return self.save(user)

    def delete(self, user_id: int) -> Optional[User]:
        """Delete a user and return the deleted row, or None if absent."""
        user = self.get_by_id(user_id)
        if user is None:
            return None
        return self.remove(user)
