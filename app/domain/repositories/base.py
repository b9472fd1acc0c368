"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, List, Optional, Any, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations.

    Mutating methods commit by default. Passing ``commit=False`` only flushes,
    leaving the caller to commit or roll back several writes together.
    """

    def get_by_id(self, id: int) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    def list(self, skip: int = 0, limit: int = 100) -> List[T]:
        """List entities with pagination."""
        ...

    def create(self, obj_in: Any, commit: bool = True) -> T:
        """Create a new entity."""
        ...

    def update(self, db_obj: T, obj_in: Any, commit: bool = True) -> T:
        """Update an existing entity."""
        ...

    def delete(self, id: int, commit: bool = True) -> Optional[T]:
        """Delete an entity by ID."""
        ...

    def commit(self) -> None:
        """Commit pending writes."""
        ...

    def rollback(self) -> None:
        """Discard pending writes."""
        ...

    def refresh(self, db_obj: T) -> None:
        """Reload an entity from storage after a commit."""
        ...
