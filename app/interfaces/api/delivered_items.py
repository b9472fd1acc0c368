"""Delivered item API routes — search, update, archive, revert, delete."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile

from app.application.services.delivery_service import (
    delete_delivered,
    get_delivered,
    list_delivered,
    revert_delivery,
    serialize_delivered_items,
    set_archived,
    update_delivered,
)
from app.application.services.item_service import serialize_lost_items
from app.domain.identity import Identity
from app.domain.references import parse_expand
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.item import DeliveredItemRead, DeliveredItemUpdate, ItemFilter, RevertResponse
from app.infrastructure.image_host import ImageHost, purge_images
from app.interfaces.api.deps import get_current_identity
from app.interfaces.api.forms import build_form_model, read_image_files
from app.interfaces.deps import (
    get_delivered_item_repository,
    get_image_host,
    get_lost_item_repository,
    get_user_repository,
)

router = APIRouter(prefix="/api/delivered-items", tags=["Delivered Items"])


@router.get("", response_model=list[DeliveredItemRead])
def search(
    q: Optional[str] = None,
    include_archived: bool = False,
    expand: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    filters = ItemFilter(q=q, include_archived=include_archived)
    return serialize_delivered_items(user_repo, list_delivered(identity, repo, filters), parse_expand(expand))


@router.get("/my", response_model=list[DeliveredItemRead])
def my_deliveries(
    include_archived: bool = False,
    expand: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    filters = ItemFilter(include_archived=include_archived)
    items = list_delivered(identity, repo, filters, mine=True)
    return serialize_delivered_items(user_repo, items, parse_expand(expand))


@router.get("/{delivered_id}", response_model=DeliveredItemRead)
def read(
    delivered_id: int,
    expand: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    item = get_delivered(identity, repo, delivered_id)
    return serialize_delivered_items(user_repo, [item], parse_expand(expand))[0]


@router.put("/{delivered_id}", response_model=DeliveredItemRead)
async def update(
    delivered_id: int,
    background_tasks: BackgroundTasks,
    item_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    flight_number: Optional[str] = Form(None),
    date_found: Optional[datetime] = Form(None),
    customer_name: Optional[str] = Form(None),
    customer_email: Optional[str] = Form(None),
    customer_phone: Optional[str] = Form(None),
    customer_identification: Optional[str] = Form(None),
    delivery_notes: Optional[str] = Form(None),
    delivery_photos: Optional[List[UploadFile]] = File(None),
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    body = build_form_model(
        DeliveredItemUpdate,
        item_name=item_name,
        description=description,
        location=location,
        category=category,
        flight_number=flight_number,
        date_found=date_found,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
        customer_identification=customer_identification,
        delivery_notes=delivery_notes,
    )
    photos = await read_image_files(delivery_photos) if delivery_photos else None
    item, replaced = await update_delivered(identity, repo, image_host, delivered_id, body, photos)
    background_tasks.add_task(purge_images, image_host, replaced)
    return serialize_delivered_items(user_repo, [item])[0]


@router.put("/{delivered_id}/archive", response_model=DeliveredItemRead)
def archive(
    delivered_id: int,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return serialize_delivered_items(user_repo, [set_archived(identity, repo, delivered_id, True)])[0]


@router.put("/{delivered_id}/unarchive", response_model=DeliveredItemRead)
def unarchive(
    delivered_id: int,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    return serialize_delivered_items(user_repo, [set_archived(identity, repo, delivered_id, False)])[0]


@router.post("/{delivered_id}/revert", response_model=RevertResponse)
async def revert(
    delivered_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(get_current_identity),
    lost_repo: LostItemRepository = Depends(get_lost_item_repository),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    item, photo_ids = await revert_delivery(identity, lost_repo, repo, delivered_id)
    background_tasks.add_task(purge_images, image_host, photo_ids)
    return RevertResponse(
        message="Item reverted to active items",
        item=serialize_lost_items(user_repo, [item])[0],
    )


@router.delete("/{delivered_id}")
def delete(
    delivered_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(get_current_identity),
    repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    public_ids = delete_delivered(identity, repo, delivered_id)
    background_tasks.add_task(purge_images, image_host, public_ids)
    return {"message": "Delivered item deleted successfully"}
