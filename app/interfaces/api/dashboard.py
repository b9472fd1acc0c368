"""Dashboard API — item counts for the station overview."""

from fastapi import APIRouter, Depends

from app.application.services.dashboard_service import get_stats
from app.domain.identity import Identity
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.schemas.item import DashboardStats
from app.interfaces.api.deps import get_current_identity
from app.interfaces.deps import get_delivered_item_repository, get_lost_item_repository

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def stats(
    identity: Identity = Depends(get_current_identity),
    lost_repo: LostItemRepository = Depends(get_lost_item_repository),
    delivered_repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
):
    return get_stats(identity, lost_repo, delivered_repo)
