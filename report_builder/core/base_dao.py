# report_builder/core/base_dao.py
"""Generic base DAO for common database operations."""

from typing import Generic, TypeVar, Optional, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy import select, and_, func, delete
from abc import ABC
from report_builder.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType], ABC):
    """Generic DAO for common database operations.

    Write methods commit by default. Pass ``commit=False`` to only flush, so a
    service can group several writes into one transaction and commit (or roll
    back) them together.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get record by ID."""
        return self.db.get(self.model, id)

    def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """Get single record by field value."""
        if not hasattr(self.model, field_name):
            return None

        query = select(self.model).where(getattr(self.model, field_name) == value)
        result = self.db.execute(query)
        return result.scalars().first()

    def create(self, commit: bool = True, **data) -> ModelType:
        """Create new record."""
        db_obj = self.model(**data)
        self.db.add(db_obj)
        self._finish(db_obj, commit)
        return db_obj

    def update(self, db_obj: ModelType, commit: bool = True, **data) -> ModelType:
        """Update existing record."""
        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self._finish(db_obj, commit)
        return db_obj

    def delete(self, id: int, commit: bool = True) -> bool:
        """Delete record by ID."""
        db_obj = self.get_by_id(id)
        if not db_obj:
            return False

        self.db.delete(db_obj)
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        return True

    def delete_all(self) -> int:
        """Bulk delete every row of the table; the caller commits."""
        result = self.db.execute(delete(self.model))
        return result.rowcount or 0

    def count(self, **filters) -> int:
        """Count records with optional filtering."""
        query = select(func.count(self.model.id))

        conditions = self._filter_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = self.db.execute(query)
        return result.scalar() or 0

    def _filter_conditions(self, filters: dict) -> list:
        return [
            getattr(self.model, key) == value
            for key, value in filters.items()
            if hasattr(self.model, key) and value is not None
        ]

    def _finish(self, db_obj: ModelType, commit: bool) -> None:
        if commit:
            self.db.commit()
            self.db.refresh(db_obj)
        else:
            self.db.flush()
