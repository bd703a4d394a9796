"""
Base repository interfaces for the data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Generic, TypeVar, Optional, List, Type, Mapping, Any
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from abc import ABC, abstractmethod

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base SQLAlchemy repository providing common CRUD operations.
    All SQL repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by primary key"""
        return self.db.get(self.model, entity_id)

    def create(self, entity: ModelType) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelType) -> ModelType:
        """Update existing entity"""
        self.db.commit()
        self.db.refresh(entity)
        return entity


class ReadingStore(ABC):
    """
    Storage contract for readings, scoped to the owning user.

    Implemented by the in-memory map, the SQL repository and the hosted
    Supabase table. Listings are ordered newest first.
    """

    @abstractmethod
    def list_readings(self, user_id: UUID) -> List[Any]:
        """All readings of a user"""

    @abstractmethod
    def get_reading(self, user_id: UUID, reading_id: UUID) -> Optional[Any]:
        """One reading, or None when it does not exist or belongs to someone else"""

    @abstractmethod
    def create_reading(self, user_id: UUID, data: Mapping[str, Any]) -> Any:
        """Persist a reading; the store assigns id and, if absent, timestamp"""

    @abstractmethod
    def update_reading(
        self, user_id: UUID, reading_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Any]:
        """Apply a partial update; None when the reading is missing"""

    @abstractmethod
    def delete_reading(self, user_id: UUID, reading_id: UUID) -> bool:
        """Remove a reading; False when it was missing"""

    def list_by_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> List[Any]:
        """Readings with start <= timestamp <= end"""
        return [
            r for r in self.list_readings(user_id) if start <= r.timestamp <= end
        ]
