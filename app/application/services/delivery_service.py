"""
Delivery service — moving items between the active and delivered phases.

Deliver and Revert each write two tables. Both writes are flushed in the same
session and committed once, so a failure leaves neither phase changed. Hosted
images uploaded before the commit are destroyed again if it fails.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog
from fastapi.concurrency import run_in_threadpool

from app.application.services.item_service import check_image_files, get_item
from app.application.services.saga import Saga
from app.core.exceptions import EntityNotFoundException, ValidationException
from app.domain.identity import Identity
from app.domain.lifecycle import ItemStatus
from app.domain.models.delivered_item import DeliveredItem
from app.domain.models.lost_item import LostItem
from app.domain.policy import Action, enforce, owner_scope
from app.domain.references import RELATIONS, Unresolved, to_user_ref
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.item import (
    CustomerInfo,
    DeliveredItemRead,
    DeliveredItemUpdate,
    DeliveryRequest,
    ImageInfo,
    ItemFilter,
)
from app.infrastructure.image_host import ImageFile, ImageHost, purge_images, upload_images

logger = structlog.get_logger(__name__)

REQUIRED_DELIVERY_FIELDS = (
    "customer_name",
    "customer_email",
    "customer_phone",
    "customer_identification",
    "signature",
)

DESCRIPTIVE_FIELDS = (
    "item_name",
    "description",
    "location",
    "category",
    "flight_number",
    "date_found",
    "images",
    "found_by_id",
    "supervisor_id",
)


def serialize_delivered_items(
    user_repo: UserRepository,
    items: Sequence[DeliveredItem],
    expand: Sequence[str] = (),
) -> list[DeliveredItemRead]:
    relations = [name for name in RELATIONS if name in expand]
    references = {}
    if relations:
        ids = {getattr(item, f"{name}_id") for item in items for name in relations}
        references = user_repo.resolve_references(i for i in ids if i is not None)

    result = []
    for item in items:
        expanded = {}
        for name in relations:
            user_id = getattr(item, f"{name}_id")
            if user_id is not None:
                expanded[name] = to_user_ref(references.get(user_id, Unresolved(user_id)))

        result.append(
            DeliveredItemRead(
                id=item.id,
                item_name=item.item_name,
                description=item.description or "",
                location=item.location,
                category=item.category,
                flight_number=item.flight_number,
                date_found=item.date_found,
                images=[ImageInfo(**image) for image in item.images or []],
                found_by_id=item.found_by_id,
                supervisor_id=item.supervisor_id,
                delivered_by_id=item.delivered_by_id,
                customer_info=CustomerInfo(
                    name=item.customer_name,
                    email=item.customer_email,
                    phone=item.customer_phone,
                    identification=item.customer_identification,
                ),
                signature=item.signature,
                delivery_notes=item.delivery_notes,
                delivery_photos=[ImageInfo(**photo) for photo in item.delivery_photos or []],
                date_delivered=item.date_delivered,
                archived=bool(item.archived),
                created_at=item.created_at,
                updated_at=item.updated_at,
                **expanded,
            )
        )
    return result


def get_delivered(
    identity: Identity,
    repo: DeliveredItemRepository,
    delivered_id: int,
    action: Action = Action.DELIVERED_READ,
) -> DeliveredItem:
    item = repo.get_by_id(delivered_id)
    if item is None:
        raise EntityNotFoundException("Delivered item not found", details={"delivered_item_id": delivered_id})
    enforce(identity, action, item)
    return item


def list_delivered(
    identity: Identity,
    repo: DeliveredItemRepository,
    filters: ItemFilter,
    mine: bool = False,
) -> list[DeliveredItem]:
    """Search delivered items; ``mine`` restricts to items the caller found."""
    owner_id = identity.id if mine else owner_scope(identity, Action.DELIVERED_READ)
    return repo.search(filters.model_copy(update={"owner_id": owner_id}))


def _missing_delivery_fields(body: DeliveryRequest) -> list[str]:
    return [name for name in REQUIRED_DELIVERY_FIELDS if not (getattr(body, name) or "").strip()]


def _move_to_delivered(
    lost_repo: LostItemRepository,
    delivered_repo: DeliveredItemRepository,
    item: LostItem,
    body: DeliveryRequest,
    photos: list[ImageInfo],
    identity: Identity,
) -> DeliveredItem:
    try:
        delivered = delivered_repo.create(
            DeliveredItem(
                **{name: getattr(item, name) for name in DESCRIPTIVE_FIELDS},
                customer_name=body.customer_name.strip(),
                customer_email=body.customer_email.strip(),
                customer_phone=body.customer_phone.strip(),
                customer_identification=body.customer_identification.strip(),
                signature=body.signature,
                delivery_notes=body.delivery_notes,
                delivery_photos=[p.model_dump() for p in photos],
                delivered_by_id=identity.id,
                date_delivered=datetime.now(timezone.utc),
                archived=False,
            ),
            commit=False,
        )
        lost_repo.delete(item.id, commit=False)
        delivered_repo.commit()
        delivered_repo.refresh(delivered)
    except Exception:
        delivered_repo.rollback()
        raise
    return delivered


async def deliver_item(
    identity: Identity,
    lost_repo: LostItemRepository,
    delivered_repo: DeliveredItemRepository,
    image_host: ImageHost,
    item_id: int,
    body: DeliveryRequest,
    photos: Sequence[ImageFile] = (),
) -> DeliveredItem:
    """Hand an active item to its customer, producing exactly one delivered record."""
    item = await run_in_threadpool(get_item, identity, lost_repo, item_id, Action.ITEM_DELIVER)

    missing = _missing_delivery_fields(body)
    if missing:
        raise ValidationException("Missing required delivery information", details={"missing_fields": missing})
    check_image_files(photos)

    saga = Saga("deliver_item", lost_item_id=item.id)
    uploaded = await saga.step(
        "upload_delivery_photos",
        lambda: upload_images(image_host, photos, item.category, item.flight_number),
        compensate=lambda done: purge_images(image_host, [p.public_id for p in done]),
    )
    delivered = await saga.step(
        "move_to_delivered",
        lambda: run_in_threadpool(_move_to_delivered, lost_repo, delivered_repo, item, body, uploaded, identity),
    )
    logger.info("Item delivered", lost_item_id=item_id, delivered_item_id=delivered.id)
    return delivered


def _move_to_lost(
    lost_repo: LostItemRepository,
    delivered_repo: DeliveredItemRepository,
    delivered: DeliveredItem,
    identity: Identity,
) -> LostItem:
    try:
        fields = {name: getattr(delivered, name) for name in DESCRIPTIVE_FIELDS}
        if fields["supervisor_id"] is None:
            fields["supervisor_id"] = identity.id
        item = lost_repo.create(
            LostItem(**fields, status=ItemStatus.ON_HAND.value),
            commit=False,
        )
        delivered_repo.delete(delivered.id, commit=False)
        lost_repo.commit()
        lost_repo.refresh(item)
    except Exception:
        lost_repo.rollback()
        raise
    return item


async def revert_delivery(
    identity: Identity,
    lost_repo: LostItemRepository,
    delivered_repo: DeliveredItemRepository,
    delivered_id: int,
) -> tuple[LostItem, list[str]]:
    """
    Turn a delivered record back into a new active item (fresh id, ``onHand``,
    original found date). Returns the new item and the delivery photo ids
    that no longer belong to any record.
    """
    delivered = await run_in_threadpool(
        get_delivered, identity, delivered_repo, delivered_id, Action.DELIVERED_REVERT
    )
    photo_ids = [photo["public_id"] for photo in delivered.delivery_photos or []]

    saga = Saga("revert_delivery", delivered_item_id=delivered_id)
    item = await saga.step(
        "move_to_lost",
        lambda: run_in_threadpool(_move_to_lost, lost_repo, delivered_repo, delivered, identity),
    )
    logger.info("Delivery reverted", delivered_item_id=delivered_id, lost_item_id=item.id)
    return item, photo_ids


def set_archived(
    identity: Identity,
    repo: DeliveredItemRepository,
    delivered_id: int,
    archived: bool,
) -> DeliveredItem:
    item = get_delivered(identity, repo, delivered_id, Action.DELIVERED_ARCHIVE)
    item = repo.update(item, {"archived": archived})
    logger.info("Delivered item archived" if archived else "Delivered item unarchived", delivered_item_id=item.id)
    return item


async def update_delivered(
    identity: Identity,
    repo: DeliveredItemRepository,
    image_host: ImageHost,
    delivered_id: int,
    body: DeliveredItemUpdate,
    photos: Optional[Sequence[ImageFile]] = None,
) -> tuple[DeliveredItem, list[str]]:
    """
    Update descriptive and customer fields. When ``photos`` is given the
    delivery photo set is replaced: new photos are uploaded first and the
    replaced ids are returned for purging after the commit.
    """
    item = await run_in_threadpool(get_delivered, identity, repo, delivered_id, Action.DELIVERED_EDIT)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    replaced: list[str] = []

    saga = Saga("update_delivered", delivered_item_id=item.id)
    if photos is not None:
        check_image_files(photos)
        uploaded = await saga.step(
            "upload_delivery_photos",
            lambda: upload_images(image_host, photos, item.category, item.flight_number),
            compensate=lambda done: purge_images(image_host, [p.public_id for p in done]),
        )
        replaced = [photo["public_id"] for photo in item.delivery_photos or []]
        changes["delivery_photos"] = [p.model_dump() for p in uploaded]

    item = await saga.step("save_changes", lambda: run_in_threadpool(repo.update, item, changes))
    logger.info("Delivered item updated", delivered_item_id=item.id, fields=sorted(changes))
    return item, replaced


def delete_delivered(identity: Identity, repo: DeliveredItemRepository, delivered_id: int) -> list[str]:
    """Remove a delivered record; returns every hosted image id it referenced."""
    item = get_delivered(identity, repo, delivered_id, Action.DELIVERED_DELETE)
    public_ids = [image["public_id"] for image in [*(item.images or []), *(item.delivery_photos or [])]]
    repo.delete(item.id)
    logger.info("Delivered item deleted", delivered_item_id=delivered_id, images=len(public_ids))
    return public_ids
