"""Permission service — the capability catalog and per-user grants."""

from typing import List

import structlog

from app.core.exceptions import ConflictException, EntityNotFoundException, ValidationException
from app.domain.models.permission import Permission
from app.domain.models.user import User
from app.domain.repositories.permission_repository import PermissionRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.permission import PermissionCreate, PermissionHolder, PermissionUpdate

logger = structlog.get_logger(__name__)

BUILTIN_PERMISSIONS: list[dict[str, str]] = [
    {"name": "view_dashboard", "description": "View the dashboard"},
    {"name": "view_all_items", "description": "View all lost and found items"},
    {"name": "view_own_items", "description": "View items you created"},
    {"name": "create_items", "description": "Create new lost and found items"},
    {"name": "edit_all_items", "description": "Edit any lost and found item"},
    {"name": "edit_own_items", "description": "Edit items you created"},
    {"name": "delete_all_items", "description": "Delete any lost and found item"},
    {"name": "delete_own_items", "description": "Delete items you created"},
    {"name": "manage_users", "description": "Manage system users"},
    {"name": "generate_reports", "description": "Generate system reports"},
    {"name": "deliver_items", "description": "Mark items as delivered"},
    {"name": "view_delivered_items", "description": "View delivered items"},
]

BUILTIN_NAMES = frozenset(p["name"] for p in BUILTIN_PERMISSIONS)


def seed_permissions(repo: PermissionRepository) -> int:
    """Insert missing built-in permissions. Returns how many were created."""
    existing = {p.name for p in repo.get_by_names([p["name"] for p in BUILTIN_PERMISSIONS])}
    created = 0
    for entry in BUILTIN_PERMISSIONS:
        if entry["name"] not in existing:
            repo.create(Permission(**entry), commit=False)
            created += 1
    repo.commit()
    if created:
        logger.info("Permission catalog seeded", created=created)
    return created


def list_permissions(repo: PermissionRepository) -> List[Permission]:
    return repo.list()


def get_permission(repo: PermissionRepository, permission_id: int) -> Permission:
    permission = repo.get_by_id(permission_id)
    if permission is None:
        raise EntityNotFoundException("Permission not found", details={"permission_id": permission_id})
    return permission


def create_permission(repo: PermissionRepository, body: PermissionCreate) -> Permission:
    if repo.get_by_name(body.name):
        raise ConflictException("Permission already exists", details={"name": body.name})
    permission = repo.create(body)
    logger.info("Permission created", permission=permission.name)
    return permission


def update_permission(repo: PermissionRepository, permission_id: int, body: PermissionUpdate) -> Permission:
    permission = get_permission(repo, permission_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    new_name = changes.get("name")
    if new_name and new_name != permission.name:
        if permission.name in BUILTIN_NAMES:
            raise ValidationException(
                "Built-in permissions cannot be renamed",
                details={"code": "BUILTIN_PERMISSION", "name": permission.name},
            )
        other = repo.get_by_name(new_name)
        if other is not None and other.id != permission.id:
            raise ConflictException("Permission already exists", details={"name": new_name})

    return repo.update(permission, changes)


def delete_permission(
    repo: PermissionRepository,
    user_repo: UserRepository,
    permission_id: int,
) -> None:
    """Delete a permission unless some user still holds it."""
    permission = get_permission(repo, permission_id)

    holders = user_repo.list_with_permission(permission.id)
    if holders:
        raise ConflictException(
            "Permission is in use and cannot be deleted",
            details={
                "code": "PERMISSION_IN_USE",
                "users": [
                    PermissionHolder(
                        id=user.id,
                        name=f"{user.first_name} {user.last_name}",
                        employee_number=user.employee_number,
                    ).model_dump()
                    for user in holders
                ],
            },
        )

    repo.delete(permission.id)
    logger.info("Permission deleted", permission=permission.name)


def get_user_permissions(user_repo: UserRepository, user_id: int) -> List[Permission]:
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundException("User not found", details={"user_id": user_id})
    return sorted(user.permissions, key=lambda p: p.name)


def set_user_permissions(
    repo: PermissionRepository,
    user_repo: UserRepository,
    user_id: int,
    names: List[str],
) -> User:
    """Replace the user's permission set with exactly ``names``."""
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise EntityNotFoundException("User not found", details={"user_id": user_id})

    wanted = sorted(set(names))
    permissions = repo.get_by_names(wanted)
    unknown = sorted(set(wanted) - {p.name for p in permissions})
    if unknown:
        raise ValidationException("Invalid permissions provided", details={"unknown": unknown})

    user.permissions = permissions
    user_repo.commit()
    logger.info("Permissions replaced", target_user_id=user.id, permissions=wanted)
    return user
