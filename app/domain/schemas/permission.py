"""Pydantic schemas for the permission catalog."""

from typing import Optional

from pydantic import BaseModel, Field


class PermissionBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)


class PermissionRead(PermissionBase):
    id: int

    model_config = {"from_attributes": True}


class UserPermissionsUpdate(BaseModel):
    """Complete desired permission set for a user."""
    permissions: list[str]


class PermissionHolder(BaseModel):
    id: int
    name: str
    employee_number: str
