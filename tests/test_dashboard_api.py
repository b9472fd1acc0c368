"""Dashboard stats tests."""

from datetime import datetime

import pytest
import pytz

from app.application.services.dashboard_service import local_day_start
from tests.helpers import CUSTOMER_FORM, report


def test_local_day_start_uses_configured_timezone():
    # 02:30 UTC on Oct 18 is still Oct 17 in Toronto (UTC-4)
    now = pytz.utc.localize(datetime(2026, 10, 18, 2, 30))
    assert local_day_start(now) == pytz.utc.localize(datetime(2026, 10, 17, 4, 0))


class TestDashboard:

    @pytest.mark.asyncio
    async def test_counts(self, client, users):
        headers = users.headers(users.supervisor)
        await report(client, headers)
        await report(client, headers, flight_number="WS456")
        delivered = (await report(client, headers, flight_number="AC999")).json()
        await client.post(f"/api/items/{delivered['id']}/deliver", data=CUSTOMER_FORM, headers=headers)

        response = await client.get("/api/dashboard/stats", headers=headers)
        assert response.status_code == 200
        stats = response.json()
        assert stats["active_by_status"] == {"onHand": 2, "inProcess": 0, "archived": 0}
        assert stats["active_total"] == 2
        assert stats["delivered_total"] == 1
        assert stats["delivered_archived"] == 0

    @pytest.mark.asyncio
    async def test_requires_permission_for_employees(self, client, users):
        response = await client.get("/api/dashboard/stats", headers=users.headers(users.employee))
        assert response.status_code == 403

        await client.put(
            f"/api/auth/users/{users.employee.id}/permissions",
            json={"permissions": ["view_dashboard"]},
            headers=users.headers(users.admin),
        )
        response = await client.get("/api/dashboard/stats", headers=users.headers(users.employee))
        assert response.status_code == 200
