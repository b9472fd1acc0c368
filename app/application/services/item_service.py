"""Item service — reporting, searching, editing and deleting active (lost) items."""

from typing import Optional, Sequence

import structlog
from fastapi.concurrency import run_in_threadpool

from app.application.services.saga import Saga
from app.config import get_settings
from app.core.exceptions import EntityNotFoundException, ValidationException
from app.domain.identity import Identity
from app.domain.lifecycle import ItemStatus, normalize_edit_status, normalize_status
from app.domain.models.lost_item import LostItem
from app.domain.policy import Action, enforce, owner_scope
from app.domain.references import Unresolved, to_user_ref
from app.domain.repositories.item_repository import LostItemRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.item import ItemFilter, LostItemCreate, LostItemRead, LostItemUpdate
from app.infrastructure.image_host import ImageFile, ImageHost, purge_images, upload_images

logger = structlog.get_logger(__name__)

LOST_ITEM_RELATIONS = ("found_by", "supervisor")


def check_image_files(files: Sequence[ImageFile]) -> None:
    """Reject uploads over the per-request limit or with a non-image content type."""
    limit = get_settings().MAX_UPLOAD_FILES
    if len(files) > limit:
        raise ValidationException(
            f"At most {limit} images can be uploaded at once",
            details={"field": "images", "limit": limit, "received": len(files)},
        )
    rejected = [f.filename for f in files if not (f.content_type or "").startswith("image/")]
    if rejected:
        raise ValidationException("Only image files are allowed", details={"files": rejected})


def ensure_users_exist(user_repo: UserRepository, **references: Optional[int]) -> None:
    missing = {
        field: user_id
        for field, user_id in references.items()
        if user_id is not None and user_repo.get_by_id(user_id) is None
    }
    if missing:
        raise ValidationException("Referenced user does not exist", details=missing)


def serialize_lost_items(
    user_repo: UserRepository,
    items: Sequence[LostItem],
    expand: Sequence[str] = (),
) -> list[LostItemRead]:
    """Build read models, expanding the requested user references in one lookup."""
    relations = [name for name in LOST_ITEM_RELATIONS if name in expand]
    references = {}
    if relations:
        ids = {getattr(item, f"{name}_id") for item in items for name in relations}
        references = user_repo.resolve_references(i for i in ids if i is not None)

    result = []
    for item in items:
        read = LostItemRead.model_validate(item)
        expanded = {}
        for name in relations:
            user_id = getattr(item, f"{name}_id")
            if user_id is not None:
                expanded[name] = to_user_ref(references.get(user_id, Unresolved(user_id)))
        result.append(read.model_copy(update=expanded))
    return result


def get_item(identity: Identity, repo: LostItemRepository, item_id: int, action: Action = Action.ITEM_READ) -> LostItem:
    """Load an active item and check ``action`` against the stored record."""
    item = repo.get_by_id(item_id)
    if item is None:
        raise EntityNotFoundException("Item not found", details={"item_id": item_id})
    enforce(identity, action, item)
    return item


def list_items(identity: Identity, repo: LostItemRepository, filters: ItemFilter) -> list[LostItem]:
    status = normalize_status(filters.status).value if filters.status else None
    scoped = filters.model_copy(update={
        "status": status,
        "owner_id": owner_scope(identity, Action.ITEM_READ),
    })
    return repo.search(scoped)


async def report_item(
    identity: Identity,
    repo: LostItemRepository,
    user_repo: UserRepository,
    image_host: ImageHost,
    body: LostItemCreate,
    files: Sequence[ImageFile] = (),
) -> LostItem:
    """Register a found item in state ``onHand``. Image upload failures abort the report."""
    found_by_id = body.found_by_id if body.found_by_id is not None else identity.id
    enforce(identity, Action.ITEM_CREATE, {"found_by_id": found_by_id})
    await run_in_threadpool(
        ensure_users_exist,
        user_repo,
        found_by_id=found_by_id if found_by_id != identity.id else None,
        supervisor_id=body.supervisor_id,
    )
    check_image_files(files)

    saga = Saga("report_item", flight_number=body.flight_number)
    images = await saga.step(
        "upload_images",
        lambda: upload_images(image_host, files, body.category, body.flight_number),
        compensate=lambda uploaded: purge_images(image_host, [i.public_id for i in uploaded]),
    )
    item = await saga.step(
        "create_item",
        lambda: run_in_threadpool(
            repo.create,
            LostItem(
                item_name=body.item_name,
                description=body.description,
                location=body.location,
                category=body.category,
                flight_number=body.flight_number,
                date_found=body.date_found,
                images=[i.model_dump() for i in images],
                status=ItemStatus.ON_HAND.value,
                found_by_id=found_by_id,
                supervisor_id=body.supervisor_id,
            )
        ),
    )
    logger.info("Item reported", item_id=item.id, flight_number=item.flight_number, images=len(images))
    return item


def edit_item(
    identity: Identity,
    repo: LostItemRepository,
    user_repo: UserRepository,
    item_id: int,
    body: LostItemUpdate,
) -> LostItem:
    item = get_item(identity, repo, item_id, Action.ITEM_EDIT)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    if "status" in changes:
        changes["status"] = normalize_edit_status(changes["status"]).value
    if "supervisor_id" in changes:
        ensure_users_exist(user_repo, supervisor_id=changes["supervisor_id"])

    item = repo.update(item, changes)
    logger.info("Item edited", item_id=item.id, fields=sorted(changes))
    return item


async def add_images(
    identity: Identity,
    repo: LostItemRepository,
    image_host: ImageHost,
    item_id: int,
    files: Sequence[ImageFile],
) -> LostItem:
    """Append images to an active item."""
    item = await run_in_threadpool(get_item, identity, repo, item_id, Action.ITEM_EDIT)
    if not files:
        raise ValidationException("No images provided", details={"field": "images"})
    check_image_files(files)

    saga = Saga("add_images", item_id=item.id)
    uploaded = await saga.step(
        "upload_images",
        lambda: upload_images(image_host, files, item.category, item.flight_number),
        compensate=lambda done: purge_images(image_host, [i.public_id for i in done]),
    )
    images = [*(item.images or []), *(i.model_dump() for i in uploaded)]
    return await saga.step("save_images", lambda: run_in_threadpool(repo.update, item, {"images": images}))


def delete_item(identity: Identity, repo: LostItemRepository, item_id: int) -> list[str]:
    """
    Remove an active item. Returns the hosted image ids for the caller
    to purge once the record is gone.
    """
    item = get_item(identity, repo, item_id, Action.ITEM_DELETE)
    public_ids = [image["public_id"] for image in item.images or []]
    repo.delete(item.id)
    logger.info("Item deleted", item_id=item_id, images=len(public_ids))
    return public_ids
