"""FastAPI dependency — JWT authentication and policy checks."""

from typing import Optional

from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.services.auth_service import resolve_identity
from app.core.logging import bind_identity
from app.domain.identity import Identity
from app.domain.policy import Action, enforce
from app.domain.repositories.user_repository import UserRepository
from app.interfaces.deps import get_user_repository

security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repository),
) -> Identity:
    """Resolve the bearer token to the caller's identity and bind it to the log context."""
    token = credentials.credentials if credentials else None
    # The user lookup blocks; binding stays on the request's own context
    identity = await run_in_threadpool(resolve_identity, repo, token)
    bind_identity(identity.id, identity.employee_number, identity.role.value)
    return identity


def require(action: Action):
    """Dependency factory for actions that do not target a stored record."""

    async def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        enforce(identity, action)
        return identity

    return checker
