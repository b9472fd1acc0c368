"""
Permission Repository Interface.
"""

from typing import List, Optional

from app.domain.repositories.base import BaseRepository
from app.domain.models.permission import Permission


class PermissionRepository(BaseRepository[Permission]):
    """Interface for the permission catalog."""

    def get_by_name(self, name: str) -> Optional[Permission]:
        """Find a permission by its unique name."""
        ...

    def get_by_names(self, names: List[str]) -> List[Permission]:
        """All permissions whose name is in ``names``."""
        ...
