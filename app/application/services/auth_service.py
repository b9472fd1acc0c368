"""Auth service — JWT token management, password hashing and identity resolution."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings
from app.core.exceptions import ConflictException, UnauthorizedException
from app.domain.identity import Identity, Role
from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES))
    claims = {"sub": str(user_id), "iat": issued_at, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify signature and expiry and return the claims.

    Only the configured algorithm is accepted; the header is checked before
    the claims so unsigned (``alg: none``) tokens never reach ``jwt.decode``.
    """
    settings = get_settings()
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        raise UnauthorizedException("Token is not valid", details={"code": "INVALID_TOKEN"})

    if header.get("alg") != settings.JWT_ALGORITHM:
        raise UnauthorizedException("Token is not valid", details={"code": "INVALID_TOKEN"})

    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired", details={"code": "TOKEN_EXPIRED"})
    except JWTError:
        raise UnauthorizedException("Token is not valid", details={"code": "INVALID_TOKEN"})


def resolve_identity(repo: UserRepository, token: Optional[str]) -> Identity:
    """Authentication gate: bearer token -> stored user -> request identity."""
    if not token:
        raise UnauthorizedException(
            "No authentication token, authorization denied",
            details={"code": "NO_TOKEN"},
        )

    claims = decode_access_token(token)
    subject = claims.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedException("Token is not valid", details={"code": "INVALID_TOKEN"})

    user = repo.get_by_id(user_id)
    if user is None:
        raise UnauthorizedException("User not found", details={"code": "USER_NOT_FOUND"})

    return Identity.from_user(user)


def authenticate_user(repo: UserRepository, employee_number: str, password: str) -> User:
    user = repo.get_by_employee_number(employee_number)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login rejected", employee_number=employee_number)
        raise UnauthorizedException("Invalid credentials", details={"code": "INVALID_CREDENTIALS"})
    logger.info("Login succeeded", user_id=user.id)
    return user


def create_user(
    repo: UserRepository,
    employee_number: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str = Role.EMPLOYEE.value,
) -> User:
    if repo.get_by_employee_number(employee_number):
        raise ConflictException(
            "Employee number already exists",
            details={"employee_number": employee_number},
        )

    user = repo.create(
        User(
            employee_number=employee_number,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=Role(role).value,
        )
    )
    logger.info("User created", user_id=user.id, role=user.role)
    return user


def change_password(repo: UserRepository, user_id: int, current_password: str, new_password: str) -> None:
    user = repo.get_by_id(user_id)
    if user is None:
        raise UnauthorizedException("User not found", details={"code": "USER_NOT_FOUND"})
    if not verify_password(current_password, user.password_hash):
        raise UnauthorizedException("Current password is incorrect", details={"code": "INVALID_PASSWORD"})

    repo.update(user, {"password_hash": hash_password(new_password)})
    logger.info("Password changed", user_id=user_id)
