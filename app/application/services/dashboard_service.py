"""Dashboard service — item counts for the station overview."""

from datetime import datetime, timedelta

import pytz

from app.config import get_settings
from app.domain.identity import Identity
from app.domain.policy import Action, enforce
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.schemas.item import DashboardStats


def local_day_start(now: datetime | None = None) -> datetime:
    """Midnight of the current day in the configured timezone, as UTC."""
    tz = pytz.timezone(get_settings().TIMEZONE)
    local_now = (now or datetime.now(pytz.utc)).astimezone(tz)
    midnight = tz.localize(datetime(local_now.year, local_now.month, local_now.day))
    return midnight.astimezone(pytz.utc)


def get_stats(
    identity: Identity,
    lost_repo: LostItemRepository,
    delivered_repo: DeliveredItemRepository,
) -> DashboardStats:
    enforce(identity, Action.DASHBOARD_VIEW)

    by_status = lost_repo.count_by_status()
    today = local_day_start()

    return DashboardStats(
        active_by_status=by_status,
        active_total=sum(by_status.values()),
        delivered_total=delivered_repo.count(),
        delivered_archived=delivered_repo.count(archived=True),
        found_today=lost_repo.count_found_since(today),
        found_last_7_days=lost_repo.count_found_since(today - timedelta(days=6)),
    )
