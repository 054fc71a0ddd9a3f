"""Base repository with common CRUD operations.

This module provides a generic base repository that can be extended
for specific entity types.
"""

from __future__ import annotations

from typing import Generic
from typing import Optional
from typing import Sequence
from typing import Type
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.base import Base
from app.exceptions import ValidationError

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages. The model
           must have an integer ``id`` primary key.
    """

    def __init__(self, session: Session, model: Type[T]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy session for database operations.
            model: The SQLAlchemy model class.
        """
        self._session = session
        self._model = model

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """Get an entity by its primary key, or None."""
        return self._session.get(self._model, entity_id)

    def get_all(self) -> Sequence[T]:
        """Get all entities ordered by ascending id."""
        query = select(self._model).order_by(self._model.id.asc())  # type: ignore[attr-defined]
        return self._session.execute(query).scalars().all()

    def _flush(self) -> None:
        """Flush pending changes, mapping constraint violations.

        Raises:
            ValidationError: With the database's message when a unique or
                not-null constraint is violated.
        """
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise ValidationError(str(exc.orig).strip()) from exc

    def add(self, entity: T) -> T:
        """Insert an entity and return it with generated fields populated."""
        self._session.add(entity)
        self._flush()
        self._session.refresh(entity)
        return entity

    def save(self, entity: T) -> T:
        """Persist changes to an existing entity."""
        self._session.add(entity)
        self._flush()
        self._session.refresh(entity)
        return entity

    def remove(self, entity: T) -> T:
        """Delete an entity and return it as it was before deletion."""
        self._session.delete(entity)
        self._flush()
        return entity
