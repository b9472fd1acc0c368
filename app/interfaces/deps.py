"""
API Dependencies.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from app.domain.models.delivered_item import DeliveredItem
from app.domain.models.lost_item import LostItem
from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.repositories.permission_repository import PermissionRepository
from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.database import get_db
from app.infrastructure.image_host import ImageHost, ImageHostClient
from app.infrastructure.repositories.item_repository import (
    SQLAlchemyDeliveredItemRepository,
    SQLAlchemyLostItemRepository,
)
from app.infrastructure.repositories.permission_repository import SQLAlchemyPermissionRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)


def get_permission_repository(db: Session = Depends(get_db)) -> PermissionRepository:
    """Get permission repository instance."""
    return SQLAlchemyPermissionRepository(db, Permission)


def get_lost_item_repository(db: Session = Depends(get_db)) -> LostItemRepository:
    """Get active item repository instance."""
    return SQLAlchemyLostItemRepository(db, LostItem)


def get_delivered_item_repository(db: Session = Depends(get_db)) -> DeliveredItemRepository:
    """Get delivered item repository instance."""
    return SQLAlchemyDeliveredItemRepository(db, DeliveredItem)


@lru_cache
def get_image_host() -> ImageHost:
    """Shared image host client, configured from settings."""
    return ImageHostClient()
