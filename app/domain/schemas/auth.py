"""Pydantic schemas for Auth."""

from pydantic import BaseModel, Field

from app.domain.schemas.user import UserRead


class RegisterRequest(BaseModel):
    employee_number: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginRequest(BaseModel):
    employee_number: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
