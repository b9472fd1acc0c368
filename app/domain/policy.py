"""
Authorization policy.

A single decision function used by every sensitive route:

    decision = evaluate(identity, Action.ITEM_EDIT, stored_item)

Rules, first match wins:
    1. admin        -> allow everything
    2. supervisor   -> allow item reads/writes and delivery, deny admin-only actions
    3. employee     -> allow when the caller is the resource's ``found_by`` owner
    4. employee     -> allow when a granted permission covers the action on any resource
    5. otherwise    -> deny

The resource is always the *stored* record, never the request payload.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from app.core.exceptions import ForbiddenException
from app.domain.identity import Identity, Role


class Action(str, Enum):
    ITEM_CREATE = "item.create"
    ITEM_READ = "item.read"
    ITEM_EDIT = "item.edit"
    ITEM_DELETE = "item.delete"
    ITEM_DELIVER = "item.deliver"
    DELIVERED_READ = "delivered.read"
    DELIVERED_EDIT = "delivered.edit"
    DELIVERED_ARCHIVE = "delivered.archive"
    DELIVERED_DELETE = "delivered.delete"
    DELIVERED_REVERT = "delivered.revert"
    DASHBOARD_VIEW = "dashboard.view"
    USER_READ = "user.read"
    USER_MANAGE = "user.manage"
    PERMISSION_MANAGE = "permission.manage"


ADMIN_ONLY = frozenset({
    Action.DELIVERED_REVERT,
    Action.USER_MANAGE,
    Action.PERMISSION_MANAGE,
})

# Actions where ownership of the stored record is meaningful
OWNABLE = frozenset({
    Action.ITEM_CREATE,
    Action.ITEM_READ,
    Action.ITEM_EDIT,
    Action.ITEM_DELETE,
    Action.ITEM_DELIVER,
    Action.DELIVERED_READ,
    Action.DELIVERED_EDIT,
    Action.DELIVERED_ARCHIVE,
    Action.DELIVERED_DELETE,
})

# Fine-grained permissions that lift the ownership restriction for employees
PERMISSION_GRANTS: dict[Action, str] = {
    Action.ITEM_READ: "view_all_items",
    Action.ITEM_EDIT: "edit_all_items",
    Action.ITEM_DELETE: "delete_all_items",
    Action.ITEM_DELIVER: "deliver_items",
    Action.DELIVERED_READ: "view_delivered_items",
    Action.DASHBOARD_VIEW: "view_dashboard",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def _owner_of(resource: Any) -> Optional[int]:
    if resource is None:
        return None
    if isinstance(resource, dict):
        return resource.get("found_by_id")
    return getattr(resource, "found_by_id", None)


def evaluate(identity: Identity, action: Action, resource: Any = None) -> Decision:
    """Decide whether ``identity`` may perform ``action`` on ``resource``."""
    if identity.role == Role.ADMIN:
        return Decision(True, "admin")

    if action in ADMIN_ONLY:
        return Decision(False, "admin_only")

    if identity.role == Role.SUPERVISOR:
        return Decision(True, "supervisor")

    if identity.role == Role.EMPLOYEE:
        if action in OWNABLE and resource is not None and _owner_of(resource) == identity.id:
            return Decision(True, "owner")

        granted_by = PERMISSION_GRANTS.get(action)
        if granted_by and identity.has_permission(granted_by):
            return Decision(True, f"permission:{granted_by}")

        if action in OWNABLE and resource is not None:
            return Decision(False, "not_owner")

    return Decision(False, "no_matching_rule")


def enforce(identity: Identity, action: Action, resource: Any = None) -> Decision:
    """Like :func:`evaluate`, but raises ``ForbiddenException`` on deny."""
    decision = evaluate(identity, action, resource)
    if not decision.allowed:
        raise ForbiddenException(
            "You are not allowed to perform this action",
            details={"action": action.value, "reason": decision.reason},
        )
    return decision


def owner_scope(identity: Identity, action: Action) -> Optional[int]:
    """
    Scope for list queries: ``None`` when every record is visible,
    otherwise the user id whose ``found_by`` records may be listed.
    """
    unowned = {"found_by_id": None}
    if evaluate(identity, action, unowned).allowed:
        return None
    return identity.id
