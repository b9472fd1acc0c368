"""Item lifecycle states and status vocabulary."""

from enum import Enum
from typing import Optional

from app.core.exceptions import ValidationException


class ItemStatus(str, Enum):
    ON_HAND = "onHand"
    IN_PROCESS = "inProcess"
    DELIVERED = "delivered"
    ARCHIVED = "archived"


# Client-facing hyphenated names and the internal tokens, keyed case-insensitively
_STATUS_ALIASES: dict[str, ItemStatus] = {
    "on-hand": ItemStatus.ON_HAND,
    "onhand": ItemStatus.ON_HAND,
    "in-process": ItemStatus.IN_PROCESS,
    "inprocess": ItemStatus.IN_PROCESS,
    "delivered": ItemStatus.DELIVERED,
    "archived": ItemStatus.ARCHIVED,
}

# Statuses a lost item may be edited into; delivery goes through the deliver operation
EDITABLE_STATUSES = frozenset({ItemStatus.ON_HAND, ItemStatus.IN_PROCESS, ItemStatus.ARCHIVED})


def normalize_status(value: str) -> ItemStatus:
    """Map external or internal status names to the internal token."""
    status = _STATUS_ALIASES.get(value.strip().lower())
    if status is None:
        raise ValidationException(
            f"Unknown status '{value}'",
            details={"field": "status", "allowed": sorted(_STATUS_ALIASES)},
        )
    return status


def normalize_edit_status(value: Optional[str]) -> Optional[ItemStatus]:
    """Normalize a status coming from an edit payload of an active item."""
    if value is None:
        return None
    status = normalize_status(value)
    if status not in EDITABLE_STATUSES:
        raise ValidationException(
            "Items are delivered through the deliver operation, not by editing the status",
            details={"field": "status", "value": value},
        )
    return status
