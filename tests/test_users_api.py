"""Auth and user management API tests."""

import asyncio
import contextlib
import time

import pytest

from app.domain.models.user import User
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from app.interfaces.deps import get_user_repository
from app.main import app


class TestAuthRoutes:

    @pytest.mark.asyncio
    async def test_register_then_me(self, client, db):
        response = await client.post(
            "/api/auth/register",
            json={"employee_number": "E777", "password": "secret1", "first_name": "New", "last_name": "Hire"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == "employee"
        assert "password_hash" not in body["user"]

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["employee_number"] == "E777"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client, users):
        response = await client.post(
            "/api/auth/register",
            json={"employee_number": "E001", "password": "secret1", "first_name": "A", "last_name": "B"},
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_login(self, client, users):
        response = await client.post("/api/auth/login", json={"employee_number": "S001", "password": "super-pass"})
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

        response = await client.post("/api/auth/login", json={"employee_number": "S001", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["error"]["details"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401
        assert response.json()["error"]["details"]["code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_token_of_deleted_user_stays_rejected(self, client, users):
        admin = users.headers(users.admin)
        stale_id = users.other_employee.id
        stale = users.headers(users.other_employee)

        response = await client.delete(f"/api/users/{stale_id}", headers=admin)
        assert response.status_code == 204

        response = await client.post(
            "/api/users",
            json={
                "employee_number": "S999",
                "password": "secret1",
                "first_name": "New",
                "last_name": "Supervisor",
                "role": "supervisor",
            },
            headers=admin,
        )
        assert response.status_code == 201
        assert response.json()["id"] != stale_id

        response = await client.get("/api/auth/me", headers=stale)
        assert response.status_code == 401
        assert response.json()["error"]["details"]["code"] == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_identity_lookup_leaves_event_loop_free(self, client, db, users):
        class SlowUserRepository(SQLAlchemyUserRepository):
            def get_by_id(self, id):
                time.sleep(0.3)
                return super().get_by_id(id)

        app.dependency_overrides[get_user_repository] = lambda: SlowUserRepository(db, User)
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        task = asyncio.create_task(ticker())
        response = await client.get("/api/dashboard/stats", headers=users.headers(users.admin))
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

        assert response.status_code == 200
        assert ticks >= 10

    @pytest.mark.asyncio
    async def test_change_password(self, client, users):
        headers = users.headers(users.employee)
        response = await client.post(
            "/api/auth/change-password",
            json={"current_password": "wrong", "new_password": "another1"},
            headers=headers,
        )
        assert response.status_code == 401

        response = await client.post(
            "/api/auth/change-password",
            json={"current_password": "employee-pass", "new_password": "another1"},
            headers=headers,
        )
        assert response.status_code == 200
        response = await client.post("/api/auth/login", json={"employee_number": "E001", "password": "another1"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"employee_number": "E778", "password": "123", "first_name": "A", "last_name": "B"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]["fields"] == ["password"]


class TestUserManagement:

    @pytest.mark.asyncio
    async def test_supervisor_reads_but_cannot_manage(self, client, users):
        headers = users.headers(users.supervisor)
        response = await client.get("/api/users", headers=headers)
        assert response.status_code == 200
        assert {u["employee_number"] for u in response.json()} == {"A001", "S001", "E001", "E002"}

        response = await client.post(
            "/api/users",
            json={"employee_number": "E900", "password": "secret1", "first_name": "A", "last_name": "B"},
            headers=headers,
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_employee_cannot_list_users(self, client, users):
        response = await client.get("/api/users", headers=users.headers(users.employee))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_creates_and_updates(self, client, users):
        headers = users.headers(users.admin)
        response = await client.post(
            "/api/users",
            json={
                "employee_number": "S002",
                "password": "secret1",
                "first_name": "Sue",
                "last_name": "Pervisor",
                "role": "supervisor",
            },
            headers=headers,
        )
        assert response.status_code == 201
        created = response.json()
        assert created["role"] == "supervisor"

        response = await client.put(f"/api/users/{created['id']}", json={"employee_number": "E001"}, headers=headers)
        assert response.status_code == 409

        response = await client.put(f"/api/users/{created['id']}", json={"role": "employee"}, headers=headers)
        assert response.json()["role"] == "employee"

    @pytest.mark.asyncio
    async def test_missing_user(self, client, users):
        response = await client.get("/api/users/4242", headers=users.headers(users.admin))
        assert response.status_code == 404
