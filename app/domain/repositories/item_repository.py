"""
Item Repository Interfaces.
Lost (active) and delivered items live in separate repositories.
"""

from datetime import datetime
from typing import Dict, List

from app.domain.repositories.base import BaseRepository
from app.domain.models.lost_item import LostItem
from app.domain.models.delivered_item import DeliveredItem
from app.domain.schemas.item import ItemFilter


class LostItemRepository(BaseRepository[LostItem]):
    """Interface for active items."""

    def search(self, filters: ItemFilter) -> List[LostItem]:
        """Filter by owner, status and free text; newest first."""
        ...

    def count_by_status(self) -> Dict[str, int]:
        """Number of active items per status."""
        ...

    def count_found_since(self, since: datetime) -> int:
        """Number of active items found at or after ``since``."""
        ...


class DeliveredItemRepository(BaseRepository[DeliveredItem]):
    """Interface for delivered items."""

    def search(self, filters: ItemFilter) -> List[DeliveredItem]:
        """Filter by owner, archived flag and free text; latest delivery first."""
        ...

    def count(self, archived: bool | None = None) -> int:
        """Number of delivered items, optionally by archived flag."""
        ...
