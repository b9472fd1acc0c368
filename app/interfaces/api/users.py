"""User management API routes — admins manage, supervisors may read."""

from fastapi import APIRouter, Depends, status

from app.application.services.user_service import add_user, delete_user, get_user, list_users, update_user
from app.domain.identity import Identity
from app.domain.policy import Action
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserCreate, UserRead, UserUpdate
from app.interfaces.api.deps import require
from app.interfaces.deps import get_user_repository

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserRead])
def read_users(
    identity: Identity = Depends(require(Action.USER_READ)),
    repo: UserRepository = Depends(get_user_repository),
):
    return [UserRead.model_validate(u) for u in list_users(repo)]


@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    identity: Identity = Depends(require(Action.USER_READ)),
    repo: UserRepository = Depends(get_user_repository),
):
    return UserRead.model_validate(get_user(repo, user_id))


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create(
    body: UserCreate,
    identity: Identity = Depends(require(Action.USER_MANAGE)),
    repo: UserRepository = Depends(get_user_repository),
):
    return UserRead.model_validate(add_user(repo, body))


@router.put("/{user_id}", response_model=UserRead)
def update(
    user_id: int,
    body: UserUpdate,
    identity: Identity = Depends(require(Action.USER_MANAGE)),
    repo: UserRepository = Depends(get_user_repository),
):
    return UserRead.model_validate(update_user(repo, user_id, body))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(
    user_id: int,
    identity: Identity = Depends(require(Action.USER_MANAGE)),
    repo: UserRepository = Depends(get_user_repository),
):
    delete_user(repo, user_id)
