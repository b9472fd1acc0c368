"""Authenticated identity attached to each request."""

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    EMPLOYEE = "employee"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """Normalized view of the caller, built from the stored User on every request."""

    id: int
    employee_number: str
    first_name: str
    last_name: str
    role: Role
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(
            id=user.id,
            employee_number=user.employee_number,
            first_name=user.first_name,
            last_name=user.last_name,
            role=Role(user.role),
            permissions=frozenset(p.name for p in user.permissions),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def has_permission(self, name: str) -> bool:
        return name in self.permissions
