"""
SQLAlchemy Implementation of the Item Repositories.
"""

from datetime import datetime
from typing import Dict, List

from sqlalchemy import func, or_

from app.domain.lifecycle import ItemStatus
from app.domain.models.delivered_item import DeliveredItem
from app.domain.models.lost_item import LostItem
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.schemas.item import ItemFilter
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


class SQLAlchemyLostItemRepository(SQLAlchemyRepository[LostItem], LostItemRepository):
    """Lost item repository implementation using SQLAlchemy."""

    def search(self, filters: ItemFilter) -> List[LostItem]:
        query = self.db.query(LostItem)

        if filters.owner_id is not None:
            query = query.filter(LostItem.found_by_id == filters.owner_id)
        if filters.status:
            query = query.filter(LostItem.status == filters.status)
        elif not filters.include_archived:
            query = query.filter(LostItem.status != ItemStatus.ARCHIVED.value)
        if filters.q:
            pattern = _like(filters.q)
            query = query.filter(
                or_(
                    func.lower(LostItem.flight_number).like(pattern, escape="\\"),
                    func.lower(LostItem.item_name).like(pattern, escape="\\"),
                    func.lower(LostItem.description).like(pattern, escape="\\"),
                    func.lower(LostItem.category).like(pattern, escape="\\"),
                    func.lower(LostItem.location).like(pattern, escape="\\"),
                )
            )

        return query.order_by(LostItem.created_at.desc(), LostItem.id.desc()).all()

    def count_by_status(self) -> Dict[str, int]:
        rows = (
            self.db.query(LostItem.status, func.count(LostItem.id))
            .group_by(LostItem.status)
            .all()
        )
        counts = {status.value: 0 for status in ItemStatus if status != ItemStatus.DELIVERED}
        counts.update({status: count for status, count in rows})
        return counts

    def count_found_since(self, since: datetime) -> int:
        return (
            self.db.query(func.count(LostItem.id))
            .filter(LostItem.date_found >= since)
            .scalar()
            or 0
        )


class SQLAlchemyDeliveredItemRepository(SQLAlchemyRepository[DeliveredItem], DeliveredItemRepository):
    """Delivered item repository implementation using SQLAlchemy."""

    def search(self, filters: ItemFilter) -> List[DeliveredItem]:
        query = self.db.query(DeliveredItem)

        if filters.owner_id is not None:
            query = query.filter(DeliveredItem.found_by_id == filters.owner_id)
        if not filters.include_archived:
            query = query.filter(DeliveredItem.archived.is_(False))
        if filters.q:
            pattern = _like(filters.q)
            query = query.filter(
                or_(
                    func.lower(DeliveredItem.flight_number).like(pattern, escape="\\"),
                    func.lower(DeliveredItem.description).like(pattern, escape="\\"),
                    func.lower(DeliveredItem.customer_name).like(pattern, escape="\\"),
                    func.lower(DeliveredItem.customer_email).like(pattern, escape="\\"),
                    func.lower(DeliveredItem.customer_phone).like(pattern, escape="\\"),
                )
            )

        return query.order_by(DeliveredItem.date_delivered.desc(), DeliveredItem.id.desc()).all()

    def count(self, archived: bool | None = None) -> int:
        query = self.db.query(func.count(DeliveredItem.id))
        if archived is not None:
            query = query.filter(DeliveredItem.archived.is_(archived))
        return query.scalar() or 0
