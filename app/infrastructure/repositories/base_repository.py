"""
SQLAlchemy implementation of the Base Repository.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session
from app.domain.repositories.base import BaseRepository
from app.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, id: int) -> Optional[ModelType]:
        return self.db.get(self.model, id)

    def list(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        return self.db.query(self.model).order_by(self.model.id).offset(skip).limit(limit).all()

    def create(self, obj_in: Any, commit: bool = True) -> ModelType:
        if isinstance(obj_in, self.model):
            db_obj = obj_in
        else:
            obj_data = obj_in.model_dump(exclude_unset=True) if hasattr(obj_in, "model_dump") else obj_in
            db_obj = self.model(**obj_data)

        self.db.add(db_obj)
        self._finish(db_obj, commit)
        return db_obj

    def update(self, db_obj: ModelType, obj_in: Any, commit: bool = True) -> ModelType:
        update_data = obj_in.model_dump(exclude_unset=True) if hasattr(obj_in, "model_dump") else obj_in

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.db.add(db_obj)
        self._finish(db_obj, commit)
        return db_obj

    def delete(self, id: int, commit: bool = True) -> Optional[ModelType]:
        obj = self.db.get(self.model, id)
        if obj:
            self.db.delete(obj)
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        return obj

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, db_obj: ModelType) -> None:
        self.db.refresh(db_obj)

    def _finish(self, db_obj: ModelType, commit: bool) -> None:
        if commit:
            self.db.commit()
            self.db.refresh(db_obj)
        else:
            self.db.flush()
