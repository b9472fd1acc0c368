"""
User Repository Interface.
"""

from typing import Dict, Iterable, List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.user import User
from app.domain.references import UserReference


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def get_by_employee_number(self, employee_number: str) -> Optional[User]:
        """Find a user by the unique employee number."""
        ...

    def list_with_permission(self, permission_id: int) -> List[User]:
        """Users currently holding the given permission."""
        ...

    def resolve_references(self, ids: Iterable[Optional[int]]) -> Dict[Optional[int], UserReference]:
        """Resolve stored user ids in one query; missing users stay unresolved."""
        ...
