"""
SQLAlchemy Implementation of Permission Repository.
"""

from typing import List, Optional

from app.domain.models.permission import Permission
from app.domain.repositories.permission_repository import PermissionRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyPermissionRepository(SQLAlchemyRepository[Permission], PermissionRepository):
    """Permission repository implementation using SQLAlchemy."""

    def get_by_name(self, name: str) -> Optional[Permission]:
        return self.db.query(Permission).filter(Permission.name == name).first()

    def get_by_names(self, names: List[str]) -> List[Permission]:
        if not names:
            return []
        return self.db.query(Permission).filter(Permission.name.in_(names)).all()

    def list(self, skip: int = 0, limit: int = 1000) -> List[Permission]:
        return self.db.query(Permission).order_by(Permission.name).offset(skip).limit(limit).all()
