"""Active item API routes — report, search, edit, deliver, delete."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status

from app.application.services.delivery_service import deliver_item, serialize_delivered_items
from app.application.services.item_service import (
    LOST_ITEM_RELATIONS,
    add_images,
    delete_item,
    edit_item,
    get_item,
    list_items,
    report_item,
    serialize_lost_items,
)
from app.domain.identity import Identity
from app.domain.references import parse_expand
from app.domain.repositories.item_repository import DeliveredItemRepository, LostItemRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.item import (
    DeliveredItemRead,
    DeliveryRequest,
    ItemFilter,
    LostItemCreate,
    LostItemRead,
    LostItemUpdate,
)
from app.infrastructure.image_host import ImageHost, purge_images
from app.interfaces.api.deps import get_current_identity
from app.interfaces.api.forms import build_form_model, read_image_files
from app.interfaces.deps import (
    get_delivered_item_repository,
    get_image_host,
    get_lost_item_repository,
    get_user_repository,
)

router = APIRouter(prefix="/api/items", tags=["Items"])


@router.post("", response_model=LostItemRead, status_code=status.HTTP_201_CREATED)
async def report(
    item_name: str = Form(...),
    location: str = Form(...),
    category: str = Form(...),
    flight_number: str = Form(...),
    date_found: datetime = Form(...),
    description: str = Form(""),
    found_by_id: Optional[int] = Form(None),
    supervisor_id: Optional[int] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    body = build_form_model(
        LostItemCreate,
        item_name=item_name,
        description=description,
        location=location,
        category=category,
        flight_number=flight_number,
        date_found=date_found,
        found_by_id=found_by_id,
        supervisor_id=supervisor_id,
    )
    files = await read_image_files(images)
    item = await report_item(identity, repo, user_repo, image_host, body, files)
    return serialize_lost_items(user_repo, [item])[0]


@router.get("", response_model=list[LostItemRead])
def search(
    q: Optional[str] = None,
    status: Optional[str] = None,
    include_archived: bool = False,
    expand: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    filters = ItemFilter(q=q, status=status, include_archived=include_archived)
    items = list_items(identity, repo, filters)
    return serialize_lost_items(user_repo, items, parse_expand(expand, LOST_ITEM_RELATIONS))


@router.get("/{item_id}", response_model=LostItemRead)
def read(
    item_id: int,
    expand: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    item = get_item(identity, repo, item_id)
    return serialize_lost_items(user_repo, [item], parse_expand(expand, LOST_ITEM_RELATIONS))[0]


@router.put("/{item_id}", response_model=LostItemRead)
def edit(
    item_id: int,
    body: LostItemUpdate,
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
):
    item = edit_item(identity, repo, user_repo, item_id, body)
    return serialize_lost_items(user_repo, [item])[0]


@router.post("/{item_id}/images", response_model=LostItemRead)
async def append_images(
    item_id: int,
    images: List[UploadFile] = File(...),
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    files = await read_image_files(images)
    item = await add_images(identity, repo, image_host, item_id, files)
    return serialize_lost_items(user_repo, [item])[0]


@router.post("/{item_id}/deliver", response_model=DeliveredItemRead, status_code=status.HTTP_201_CREATED)
async def deliver(
    item_id: int,
    customer_name: Optional[str] = Form(None),
    customer_email: Optional[str] = Form(None),
    customer_phone: Optional[str] = Form(None),
    customer_identification: Optional[str] = Form(None),
    signature: Optional[str] = Form(None),
    delivery_notes: Optional[str] = Form(None),
    delivery_photos: Optional[List[UploadFile]] = File(None),
    identity: Identity = Depends(get_current_identity),
    lost_repo: LostItemRepository = Depends(get_lost_item_repository),
    delivered_repo: DeliveredItemRepository = Depends(get_delivered_item_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    body = DeliveryRequest(
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
        customer_identification=customer_identification,
        signature=signature,
        delivery_notes=delivery_notes,
    )
    photos = await read_image_files(delivery_photos)
    delivered = await deliver_item(identity, lost_repo, delivered_repo, image_host, item_id, body, photos)
    return serialize_delivered_items(user_repo, [delivered])[0]


@router.delete("/{item_id}")
def delete(
    item_id: int,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(get_current_identity),
    repo: LostItemRepository = Depends(get_lost_item_repository),
    image_host: ImageHost = Depends(get_image_host),
):
    public_ids = delete_item(identity, repo, item_id)
    background_tasks.add_task(purge_images, image_host, public_ids)
    return {"message": "Item deleted successfully"}
