"""
Item Lifecycle API Tests
========================

What we test:
    ✅ report → edit → deliver → revert round trip
    ✅ Non-owner employees are denied writes regardless of payload
    ✅ Deleted users render as the placeholder identity
    ✅ Delete purges hosted images after the record is gone
    ✅ Upload failures abort the report
"""

import pytest

from app.domain.models.delivered_item import DeliveredItem
from app.domain.models.lost_item import LostItem

from tests.helpers import CUSTOMER_FORM, ITEM_FORM, report


class TestLifecycleScenario:

    @pytest.mark.asyncio
    async def test_report_edit_deliver_revert(self, client, db, users):
        # Employee reports, status omitted
        response = await report(client, users.headers(users.employee))
        assert response.status_code == 201
        reported = response.json()
        assert reported["status"] == "onHand"
        assert reported["found_by_id"] == users.employee.id
        item_id = reported["id"]

        # Supervisor moves it in process using the external vocabulary
        response = await client.put(
            f"/api/items/{item_id}",
            json={"status": "in-process"},
            headers=users.headers(users.supervisor),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "inProcess"

        # Admin delivers it
        response = await client.post(
            f"/api/items/{item_id}/deliver",
            data=CUSTOMER_FORM,
            headers=users.headers(users.admin),
        )
        assert response.status_code == 201
        delivered = response.json()
        assert delivered["archived"] is False
        assert delivered["delivered_by_id"] == users.admin.id
        assert delivered["customer_info"]["name"] == "Jane Traveller"
        assert db.query(LostItem).count() == 0
        assert db.query(DeliveredItem).count() == 1

        # Admin reverts it
        response = await client.post(
            f"/api/delivered-items/{delivered['id']}/revert",
            headers=users.headers(users.admin),
        )
        assert response.status_code == 200
        restored = response.json()["item"]
        assert restored["status"] == "onHand"
        assert restored["date_found"] == reported["date_found"]
        assert restored["found_by_id"] == users.employee.id
        assert restored["id"] != item_id
        assert db.query(DeliveredItem).count() == 0
        assert db.query(LostItem).count() == 1


class TestReport:

    @pytest.mark.asyncio
    async def test_report_uploads_images(self, client, users, image_host):
        files = [
            ("images", ("a.jpg", b"jpeg-a", "image/jpeg")),
            ("images", ("b.png", b"png-b", "image/png")),
        ]
        response = await report(client, users.headers(users.employee), files=files)
        assert response.status_code == 201
        images = response.json()["images"]
        assert [i["public_id"] for i in images] == image_host.uploaded
        assert image_host.uploaded[0].startswith("lost-and-found/bags/AC123/")

    @pytest.mark.asyncio
    async def test_non_image_upload_rejected(self, client, users, image_host):
        files = [("images", ("notes.txt", b"hello", "text/plain"))]
        response = await report(client, users.headers(users.employee), files=files)
        assert response.status_code == 400
        assert image_host.uploaded == []

    @pytest.mark.asyncio
    async def test_upload_failure_aborts_report(self, client, db, users, image_host):
        image_host.fail_uploads = True
        files = [("images", ("a.jpg", b"jpeg-a", "image/jpeg"))]
        response = await report(client, users.headers(users.employee), files=files)
        assert response.status_code == 502
        assert response.json()["error"]["code"] == "DependencyException"
        assert db.query(LostItem).count() == 0

    @pytest.mark.asyncio
    async def test_employee_cannot_report_for_someone_else(self, client, users):
        response = await report(
            client,
            users.headers(users.employee),
            found_by_id=str(users.other_employee.id),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_required_field(self, client, users):
        form = {k: v for k, v in ITEM_FORM.items() if k != "flight_number"}
        response = await client.post("/api/items", data=form, headers=users.headers(users.employee))
        assert response.status_code == 400
        assert "flight_number" in response.json()["error"]["details"]["fields"]

    @pytest.mark.asyncio
    async def test_requires_token(self, client, users):
        response = await client.post("/api/items", data=ITEM_FORM)
        assert response.status_code == 401
        assert response.json()["error"]["details"]["code"] == "NO_TOKEN"


class TestOwnership:

    @pytest.mark.asyncio
    async def test_non_owner_employee_cannot_edit(self, client, users):
        item = (await report(client, users.headers(users.employee))).json()

        response = await client.put(
            f"/api/items/{item['id']}",
            json={"item_name": "Mine now", "found_by_id": users.other_employee.id},
            headers=users.headers(users.other_employee),
        )
        assert response.status_code == 403
        assert response.json()["error"]["details"]["reason"] == "not_owner"

    @pytest.mark.asyncio
    async def test_non_owner_employee_cannot_delete_or_deliver(self, client, users):
        item = (await report(client, users.headers(users.employee))).json()
        headers = users.headers(users.other_employee)

        assert (await client.delete(f"/api/items/{item['id']}", headers=headers)).status_code == 403
        response = await client.post(f"/api/items/{item['id']}/deliver", data=CUSTOMER_FORM, headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_employee_lists_only_own_items(self, client, users):
        await report(client, users.headers(users.employee))
        await report(client, users.headers(users.other_employee), flight_number="WS456")

        own = (await client.get("/api/items", headers=users.headers(users.employee))).json()
        assert [i["flight_number"] for i in own] == ["AC123"]

        everything = (await client.get("/api/items", headers=users.headers(users.supervisor))).json()
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_view_all_items_permission_widens_list(self, client, users):
        await report(client, users.headers(users.employee))
        await client.put(
            f"/api/auth/users/{users.other_employee.id}/permissions",
            json={"permissions": ["view_all_items"]},
            headers=users.headers(users.admin),
        )
        listed = (await client.get("/api/items", headers=users.headers(users.other_employee))).json()
        assert len(listed) == 1


class TestEditAndSearch:

    @pytest.mark.asyncio
    async def test_edit_cannot_set_delivered(self, client, users):
        item = (await report(client, users.headers(users.employee))).json()
        response = await client.put(
            f"/api/items/{item['id']}",
            json={"status": "delivered"},
            headers=users.headers(users.employee),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_archived_items_hidden_by_default(self, client, users):
        headers = users.headers(users.supervisor)
        item = (await report(client, headers)).json()
        await client.put(f"/api/items/{item['id']}", json={"status": "archived"}, headers=headers)

        assert (await client.get("/api/items", headers=headers)).json() == []
        listed = (await client.get("/api/items?include_archived=true", headers=headers)).json()
        assert [i["id"] for i in listed] == [item["id"]]

    @pytest.mark.asyncio
    async def test_free_text_search(self, client, users):
        headers = users.headers(users.supervisor)
        await report(client, headers)
        await report(client, headers, item_name="Umbrella", category="misc", flight_number="WS456", description="")

        hits = (await client.get("/api/items?q=backpack", headers=headers)).json()
        assert [i["item_name"] for i in hits] == ["Black backpack"]
        hits = (await client.get("/api/items?q=ws4", headers=headers)).json()
        assert [i["item_name"] for i in hits] == ["Umbrella"]

    @pytest.mark.asyncio
    async def test_add_images_appends(self, client, users, image_host):
        headers = users.headers(users.employee)
        item = (await report(client, headers, files=[("images", ("a.jpg", b"a", "image/jpeg"))])).json()

        response = await client.post(
            f"/api/items/{item['id']}/images",
            files=[("images", ("b.jpg", b"b", "image/jpeg"))],
            headers=headers,
        )
        assert response.status_code == 200
        assert len(response.json()["images"]) == 2


class TestReferences:

    @pytest.mark.asyncio
    async def test_relations_are_ids_unless_expanded(self, client, users):
        headers = users.headers(users.supervisor)
        await report(client, users.headers(users.employee))

        plain = (await client.get("/api/items", headers=headers)).json()[0]
        assert plain["found_by"] is None
        assert plain["found_by_id"] == users.employee.id

        expanded = (await client.get("/api/items?expand=found_by", headers=headers)).json()[0]
        assert expanded["found_by"]["employee_number"] == "E001"

    @pytest.mark.asyncio
    async def test_deleted_owner_renders_placeholder(self, client, users):
        item = (await report(client, users.headers(users.employee))).json()
        employee_id = users.employee.id
        admin_headers = users.headers(users.admin)

        response = await client.delete(f"/api/users/{employee_id}", headers=admin_headers)
        assert response.status_code == 204

        response = await client.get("/api/items?expand=found_by,supervisor", headers=admin_headers)
        assert response.status_code == 200
        listed = response.json()
        assert listed[0]["id"] == item["id"]
        assert listed[0]["found_by_id"] == employee_id
        assert listed[0]["found_by"] == {
            "id": 0,
            "first_name": "Unknown",
            "last_name": "User",
            "employee_number": "N/A",
        }


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_purges_images(self, client, db, users, image_host):
        headers = users.headers(users.employee)
        files = [("images", ("a.jpg", b"a", "image/jpeg"))]
        item = (await report(client, headers, files=files)).json()

        response = await client.delete(f"/api/items/{item['id']}", headers=headers)
        assert response.status_code == 200
        assert db.query(LostItem).count() == 0
        assert image_host.deleted == [item["images"][0]["public_id"]]

    @pytest.mark.asyncio
    async def test_delete_succeeds_when_purge_fails(self, client, db, users, image_host):
        headers = users.headers(users.employee)
        item = (await report(client, headers, files=[("images", ("a.jpg", b"a", "image/jpeg"))])).json()
        image_host.fail_deletes = True

        response = await client.delete(f"/api/items/{item['id']}", headers=headers)
        assert response.status_code == 200
        assert db.query(LostItem).count() == 0

    @pytest.mark.asyncio
    async def test_missing_item(self, client, users):
        response = await client.get("/api/items/999", headers=users.headers(users.admin))
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EntityNotFoundException"
