"""
User references held by item records.

A stored reference is either resolved to a user or left unresolved (the id is
missing or points at a deleted user). Callers only ever see a ``UserRef``:
unresolved references become the placeholder identity.
"""

from dataclasses import dataclass
from typing import Optional, Union

from app.domain.schemas.user import UserRef

PLACEHOLDER_USER_ID = 0

RELATIONS = ("found_by", "supervisor", "delivered_by")


@dataclass(frozen=True)
class Unresolved:
    id: Optional[int]


@dataclass(frozen=True)
class Resolved:
    user: UserRef


UserReference = Union[Unresolved, Resolved]


def placeholder_user() -> UserRef:
    return UserRef(
        id=PLACEHOLDER_USER_ID,
        first_name="Unknown",
        last_name="User",
        employee_number="N/A",
    )


def to_user_ref(reference: UserReference) -> UserRef:
    if isinstance(reference, Resolved):
        return reference.user
    return placeholder_user()


def parse_expand(value: Optional[str], allowed: tuple[str, ...] = RELATIONS) -> tuple[str, ...]:
    """Parse a comma separated ``expand`` parameter, ignoring unknown names."""
    if not value:
        return ()
    requested = [part.strip() for part in value.split(",")]
    return tuple(name for name in allowed if name in requested)
