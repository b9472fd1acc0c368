"""User service — administrative user management."""

from typing import List

import structlog

from app.application.services.auth_service import create_user, hash_password
from app.core.exceptions import ConflictException, EntityNotFoundException
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserCreate, UserUpdate

logger = structlog.get_logger(__name__)


def list_users(repo: UserRepository) -> List[User]:
    return repo.list(limit=1000)


def get_user(repo: UserRepository, user_id: int) -> User:
    user = repo.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundException("User not found", details={"user_id": user_id})
    return user


def add_user(repo: UserRepository, body: UserCreate) -> User:
    return create_user(
        repo,
        employee_number=body.employee_number,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
    )


def update_user(repo: UserRepository, user_id: int, body: UserUpdate) -> User:
    user = get_user(repo, user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    new_number = changes.get("employee_number")
    if new_number and new_number != user.employee_number:
        other = repo.get_by_employee_number(new_number)
        if other is not None and other.id != user.id:
            raise ConflictException(
                "Employee number already exists",
                details={"employee_number": new_number},
            )

    password = changes.pop("password", None)
    if password:
        changes["password_hash"] = hash_password(password)

    user = repo.update(user, changes)
    logger.info("User updated", target_user_id=user.id, fields=sorted(changes))
    return user


def delete_user(repo: UserRepository, user_id: int) -> None:
    """Remove a user. Items keep their dangling references and render a placeholder."""
    get_user(repo, user_id)
    repo.delete(user_id)
    logger.info("User deleted", target_user_id=user_id)
