"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from app.config import get_settings
from app.infrastructure.database import engine, Base, SessionLocal
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import AppError, global_exception_handler, request_validation_handler

# Import all models so SQLAlchemy knows about them
from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.domain.models.lost_item import LostItem
from app.domain.models.delivered_item import DeliveredItem

from app.application.services.auth_service import create_user
from app.application.services.permission_service import seed_permissions
from app.infrastructure.repositories.permission_repository import SQLAlchemyPermissionRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

# Import routers
from app.interfaces.api.auth import router as auth_router
from app.interfaces.api.users import router as users_router
from app.interfaces.api.permissions import router as permissions_router
from app.interfaces.api.items import router as items_router
from app.interfaces.api.delivered_items import router as delivered_items_router
from app.interfaces.api.dashboard import router as dashboard_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


def init_data(db: Session) -> None:
    """Seed the permission catalog and the bootstrap admin account."""
    seed_permissions(SQLAlchemyPermissionRepository(db, Permission))

    users = SQLAlchemyUserRepository(db, User)
    if not users.get_by_employee_number(settings.DEFAULT_ADMIN_EMPLOYEE_NUMBER):
        create_user(
            users,
            employee_number=settings.DEFAULT_ADMIN_EMPLOYEE_NUMBER,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            first_name="System",
            last_name="Administrator",
            role="admin",
        )
        logger.info("Default admin user created", employee_number=settings.DEFAULT_ADMIN_EMPLOYEE_NUMBER)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Lost & Found service...", env=settings.ENVIRONMENT)

    # Create DB tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    db = SessionLocal()
    try:
        init_data(db)
    finally:
        db.close()

    yield

    logger.info("Lost & Found service stopped")


app = FastAPI(
    title="Lost & Found",
    description="API Backend — airline lost and found item tracking",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Global Exception Handling
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(permissions_router)
app.include_router(items_router)
app.include_router(delivered_items_router)
app.include_router(dashboard_router)


@app.get("/")
def root():
    return {
        "name": "Lost & Found",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
