"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Dict, Iterable, List, Optional

from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.domain.references import Resolved, Unresolved, UserReference
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserRef
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def get_by_employee_number(self, employee_number: str) -> Optional[User]:
        return self.db.query(User).filter(User.employee_number == employee_number).first()

    def list(self, skip: int = 0, limit: int = 100) -> List[User]:
        return (
            self.db.query(User)
            .order_by(User.last_name, User.first_name)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_with_permission(self, permission_id: int) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.permissions.any(Permission.id == permission_id))
            .order_by(User.employee_number)
            .all()
        )

    def resolve_references(self, ids: Iterable[Optional[int]]) -> Dict[Optional[int], UserReference]:
        wanted = set(ids)
        lookup = {i for i in wanted if isinstance(i, int)}
        found: Dict[int, User] = {}
        if lookup:
            found = {u.id: u for u in self.db.query(User).filter(User.id.in_(lookup)).all()}

        references: Dict[Optional[int], UserReference] = {}
        for user_id in wanted:
            user = found.get(user_id)
            if user is None:
                references[user_id] = Unresolved(user_id)
            else:
                references[user_id] = Resolved(UserRef.model_validate(user))
        return references
