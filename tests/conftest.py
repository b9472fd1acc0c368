"""
Shared pytest fixtures.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db: in-memory SQLite session with all tables and the permission catalog
    ├── image_host: in-memory stand-in for the image hosting service
    ├── users: one user per role plus a second employee
    └── client: HTTPX AsyncClient wired to the app with db/image host overrides
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "test"

from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.application.services.auth_service import create_access_token, create_user
from app.application.services.permission_service import seed_permissions
from app.core.exceptions import DependencyException
from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.domain.schemas.item import ImageInfo
from app.infrastructure.database import Base, get_db
from app.infrastructure.repositories.permission_repository import SQLAlchemyPermissionRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from app.interfaces.deps import get_image_host
from app.main import app


class FakeImageHost:
    """Records uploads and deletes instead of calling the hosting service."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes = False

    async def upload(self, content, mime_type, original_name, category, flight_number) -> ImageInfo:
        if self.fail_uploads:
            raise DependencyException("Image upload failed", details={"file": original_name})
        public_id = f"lost-and-found/{category}/{flight_number}/{len(self.uploaded) + 1}"
        self.uploaded.append(public_id)
        url = f"https://img.test/image/upload/{public_id}.jpg"
        return ImageInfo(public_id=public_id, url=url, thumbnail_url=url)

    async def delete(self, public_id: str) -> bool:
        if self.fail_deletes:
            return False
        self.deleted.append(public_id)
        return True


@dataclass
class Accounts:
    admin: User
    supervisor: User
    employee: User
    other_employee: User

    def headers(self, user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    seed_permissions(SQLAlchemyPermissionRepository(session, Permission))
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def user_repo(db):
    return SQLAlchemyUserRepository(db, User)


@pytest.fixture
def users(user_repo):
    return Accounts(
        admin=create_user(user_repo, "A001", "admin-pass", "Ada", "Admin", role="admin"),
        supervisor=create_user(user_repo, "S001", "super-pass", "Sam", "Super", role="supervisor"),
        employee=create_user(user_repo, "E001", "employee-pass", "Eve", "Employee"),
        other_employee=create_user(user_repo, "E002", "employee-pass", "Oscar", "Other"),
    )


@pytest_asyncio.fixture
async def client(db, image_host):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_host] = lambda: image_host
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
