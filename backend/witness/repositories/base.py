"""Base repository with shared get-by-ID patterns.

Subclasses specify model_class and id_column and override _not_found()
to raise their own error; the base provides the plain lookup, the
optional lookup, and the row-locking lookup used by read-modify-write
operations.
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import WitnessException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class: The SQLAlchemy model
        id_column:   Name of the primary-key column (default "id")
    """

    model_class: Type[ModelT]
    id_column: str = "id"

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def _not_found(self, entity_id: str) -> WitnessException:
        raise NotImplementedError

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises the subclass's not-found error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).first()

    def get_for_update(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key holding a row lock until the transaction ends.

        Emits SELECT ... FOR UPDATE on PostgreSQL. SQLite ignores the clause
        and serialises writers at the database level instead.
        """
        col = getattr(self.model_class, self.id_column)
        return (
            self._base_query()
            .filter(col == entity_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
