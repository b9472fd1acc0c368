"""Permission catalog and grant API tests."""

import pytest

from app.application.services.permission_service import BUILTIN_PERMISSIONS, seed_permissions
from app.domain.models.permission import Permission
from app.infrastructure.repositories.permission_repository import SQLAlchemyPermissionRepository


def permission_id(db, name: str) -> int:
    return db.query(Permission).filter(Permission.name == name).one().id


class TestCatalog:

    def test_seeding_is_idempotent(self, db):
        repo = SQLAlchemyPermissionRepository(db, Permission)
        assert seed_permissions(repo) == 0
        assert db.query(Permission).count() == len(BUILTIN_PERMISSIONS)

    @pytest.mark.asyncio
    async def test_static_catalog(self, client, users):
        response = await client.get("/api/auth/permissions", headers=users.headers(users.employee))
        assert response.status_code == 200
        assert {p["name"] for p in response.json()} >= {"view_all_items", "deliver_items"}

        response = await client.get("/api/auth/permissions")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_admin_creates_custom_permission(self, client, users):
        headers = users.headers(users.admin)
        body = {"name": "print_labels", "description": "Print item labels"}

        response = await client.post("/api/permissions", json=body, headers=headers)
        assert response.status_code == 201

        response = await client.post("/api/permissions", json=body, headers=headers)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name_conflicts(self, client, users):
        headers = users.headers(users.admin)
        created = await client.post(
            "/api/permissions", json={"name": "print_labels", "description": "Print item labels"}, headers=headers
        )
        response = await client.put(
            f"/api/permissions/{created.json()['id']}",
            json={"name": "view_dashboard"},
            headers=headers,
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_builtin_names_cannot_be_renamed(self, client, db, users):
        response = await client.put(
            f"/api/permissions/{permission_id(db, 'view_all_items')}",
            json={"name": "see_everything"},
            headers=users.headers(users.admin),
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]["code"] == "BUILTIN_PERMISSION"

        response = await client.put(
            f"/api/permissions/{permission_id(db, 'view_all_items')}",
            json={"description": "See every active item"},
            headers=users.headers(users.admin),
        )
        assert response.status_code == 200
        assert response.json()["name"] == "view_all_items"

    @pytest.mark.asyncio
    async def test_supervisor_cannot_manage_catalog(self, client, users):
        response = await client.post(
            "/api/permissions",
            json={"name": "x", "description": "y"},
            headers=users.headers(users.supervisor),
        )
        assert response.status_code == 403
        assert response.json()["error"]["details"]["reason"] == "admin_only"


class TestDeletion:

    @pytest.mark.asyncio
    async def test_delete_blocked_while_held(self, client, db, users):
        headers = users.headers(users.admin)
        target = permission_id(db, "deliver_items")
        for user in (users.employee, users.other_employee):
            await client.put(
                f"/api/auth/users/{user.id}/permissions",
                json={"permissions": ["deliver_items"]},
                headers=headers,
            )

        response = await client.delete(f"/api/permissions/{target}", headers=headers)
        assert response.status_code == 409
        holders = response.json()["error"]["details"]["users"]
        assert holders == [
            {"id": users.employee.id, "name": "Eve Employee", "employee_number": "E001"},
            {"id": users.other_employee.id, "name": "Oscar Other", "employee_number": "E002"},
        ]

        for user in (users.employee, users.other_employee):
            await client.put(
                f"/api/auth/users/{user.id}/permissions",
                json={"permissions": []},
                headers=headers,
            )
        response = await client.delete(f"/api/permissions/{target}", headers=headers)
        assert response.status_code == 204


class TestUserGrants:

    @pytest.mark.asyncio
    async def test_set_replaces_rather_than_merges(self, client, users):
        headers = users.headers(users.admin)
        url = f"/api/auth/users/{users.employee.id}/permissions"

        await client.put(url, json={"permissions": ["view_all_items", "deliver_items"]}, headers=headers)
        response = await client.put(url, json={"permissions": ["view_dashboard", "view_dashboard"]}, headers=headers)
        assert response.status_code == 200
        assert response.json()["permissions"] == ["view_dashboard"]

        listed = (await client.get(url, headers=headers)).json()
        assert [p["name"] for p in listed] == ["view_dashboard"]

    @pytest.mark.asyncio
    async def test_unknown_names_rejected_without_change(self, client, users):
        headers = users.headers(users.admin)
        url = f"/api/auth/users/{users.employee.id}/permissions"
        await client.put(url, json={"permissions": ["view_all_items"]}, headers=headers)

        response = await client.put(url, json={"permissions": ["view_all_items", "fly_plane"]}, headers=headers)
        assert response.status_code == 400
        assert response.json()["error"]["details"]["unknown"] == ["fly_plane"]

        listed = (await client.get(url, headers=headers)).json()
        assert [p["name"] for p in listed] == ["view_all_items"]

    @pytest.mark.asyncio
    async def test_only_admin_grants(self, client, users):
        response = await client.put(
            f"/api/auth/users/{users.employee.id}/permissions",
            json={"permissions": ["view_all_items"]},
            headers=users.headers(users.supervisor),
        )
        assert response.status_code == 403
