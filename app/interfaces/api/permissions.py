"""Permission catalog API routes."""

from fastapi import APIRouter, Depends, status

from app.application.services.permission_service import (
    create_permission,
    delete_permission,
    list_permissions,
    update_permission,
)
from app.domain.identity import Identity
from app.domain.policy import Action
from app.domain.repositories.permission_repository import PermissionRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.permission import PermissionCreate, PermissionRead, PermissionUpdate
from app.interfaces.api.deps import get_current_identity, require
from app.interfaces.deps import get_permission_repository, get_user_repository

router = APIRouter(prefix="/api/permissions", tags=["Permissions"])


@router.get("", response_model=list[PermissionRead])
def read_permissions(
    identity: Identity = Depends(get_current_identity),
    repo: PermissionRepository = Depends(get_permission_repository),
):
    return list_permissions(repo)


@router.post("", response_model=PermissionRead, status_code=status.HTTP_201_CREATED)
def create(
    body: PermissionCreate,
    identity: Identity = Depends(require(Action.PERMISSION_MANAGE)),
    repo: PermissionRepository = Depends(get_permission_repository),
):
    return create_permission(repo, body)


@router.put("/{permission_id}", response_model=PermissionRead)
def update(
    permission_id: int,
    body: PermissionUpdate,
    identity: Identity = Depends(require(Action.PERMISSION_MANAGE)),
    repo: PermissionRepository = Depends(get_permission_repository),
):
    return update_permission(repo, permission_id, body)


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    permission_id: int,
    identity: Identity = Depends(require(Action.PERMISSION_MANAGE)),
    repo: PermissionRepository = Depends(get_permission_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    delete_permission(repo, user_repo, permission_id)
