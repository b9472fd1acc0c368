"""Pydantic schemas for User."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

RoleName = Literal["employee", "supervisor", "admin"]


class UserRef(BaseModel):
    """Display form of a user referenced by an item."""
    id: int
    first_name: str
    last_name: str
    employee_number: str

    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: int
    employee_number: str
    first_name: str
    last_name: str
    role: RoleName
    permissions: list[str] = Field(default_factory=list, validation_alias="permission_names")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "populate_by_name": True}


class UserCreate(BaseModel):
    employee_number: str = Field(min_length=1, max_length=50)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6)
    role: RoleName = "employee"


class UserUpdate(BaseModel):
    employee_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[RoleName] = None
