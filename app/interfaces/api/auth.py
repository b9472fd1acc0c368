"""Auth API routes — register, login, me, password and permission grants."""

from fastapi import APIRouter, Depends, status

from app.application.services.auth_service import (
    authenticate_user,
    change_password,
    create_access_token,
    create_user,
)
from app.application.services.permission_service import (
    BUILTIN_PERMISSIONS,
    get_user_permissions,
    set_user_permissions,
)
from app.domain.identity import Identity
from app.domain.policy import Action
from app.domain.repositories.permission_repository import PermissionRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest, TokenResponse
from app.domain.schemas.permission import PermissionRead, UserPermissionsUpdate
from app.domain.schemas.user import UserRead
from app.interfaces.api.deps import get_current_identity, require
from app.interfaces.deps import get_permission_repository, get_user_repository

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, repo: UserRepository = Depends(get_user_repository)):
    user = create_user(
        repo,
        employee_number=body.employee_number,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, repo: UserRepository = Depends(get_user_repository)):
    user = authenticate_user(repo, body.employee_number, body.password)
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=UserRead)
def get_me(
    identity: Identity = Depends(get_current_identity),
    repo: UserRepository = Depends(get_user_repository),
):
    return UserRead.model_validate(repo.get_by_id(identity.id))


@router.post("/change-password")
def update_password(
    body: ChangePasswordRequest,
    identity: Identity = Depends(get_current_identity),
    repo: UserRepository = Depends(get_user_repository),
):
    change_password(repo, identity.id, body.current_password, body.new_password)
    return {"message": "Password updated successfully"}


@router.get("/permissions")
def permission_catalog():
    """Built-in capability names and descriptions."""
    return BUILTIN_PERMISSIONS


@router.get("/users/{user_id}/permissions", response_model=list[PermissionRead])
def read_user_permissions(
    user_id: int,
    identity: Identity = Depends(require(Action.PERMISSION_MANAGE)),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return get_user_permissions(user_repo, user_id)


@router.put("/users/{user_id}/permissions", response_model=UserRead)
def replace_user_permissions(
    user_id: int,
    body: UserPermissionsUpdate,
    identity: Identity = Depends(require(Action.PERMISSION_MANAGE)),
    repo: PermissionRepository = Depends(get_permission_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    user = set_user_permissions(repo, user_repo, user_id, body.permissions)
    return UserRead.model_validate(user)
