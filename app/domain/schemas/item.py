"""Pydantic schemas for lost and delivered items."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.schemas.user import UserRef


class ImageInfo(BaseModel):
    public_id: str
    url: str
    thumbnail_url: Optional[str] = None


class ItemBase(BaseModel):
    item_name: str
    description: str = ""
    location: str
    category: str
    flight_number: str
    date_found: datetime


class LostItemCreate(ItemBase):
    item_name: str = Field(min_length=1, max_length=200)
    location: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    flight_number: str = Field(min_length=1, max_length=20)
    found_by_id: Optional[int] = None
    supervisor_id: Optional[int] = None


class LostItemUpdate(BaseModel):
    item_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    flight_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    date_found: Optional[datetime] = None
    status: Optional[str] = None
    supervisor_id: Optional[int] = None


class LostItemRead(ItemBase):
    id: int
    status: str
    images: list[ImageInfo] = []
    found_by_id: int
    supervisor_id: Optional[int] = None
    found_by: Optional[UserRef] = None
    supervisor: Optional[UserRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CustomerInfo(BaseModel):
    name: str
    email: str
    phone: str
    identification: str


class DeliveryRequest(BaseModel):
    """Customer data captured at the counter; completeness is checked by the lifecycle service."""
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_identification: Optional[str] = None
    signature: Optional[str] = None
    delivery_notes: Optional[str] = None


class DeliveredItemUpdate(BaseModel):
    item_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    flight_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    date_found: Optional[datetime] = None
    customer_name: Optional[str] = Field(default=None, min_length=1)
    customer_email: Optional[str] = Field(default=None, min_length=1)
    customer_phone: Optional[str] = Field(default=None, min_length=1)
    customer_identification: Optional[str] = Field(default=None, min_length=1)
    delivery_notes: Optional[str] = None


class DeliveredItemRead(ItemBase):
    id: int
    images: list[ImageInfo] = []
    found_by_id: int
    supervisor_id: Optional[int] = None
    delivered_by_id: Optional[int] = None
    found_by: Optional[UserRef] = None
    supervisor: Optional[UserRef] = None
    delivered_by: Optional[UserRef] = None
    customer_info: CustomerInfo
    signature: str
    delivery_notes: Optional[str] = None
    delivery_photos: list[ImageInfo] = []
    date_delivered: datetime
    archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemFilter(BaseModel):
    q: Optional[str] = None
    status: Optional[str] = None
    include_archived: bool = False
    owner_id: Optional[int] = None


class RevertResponse(BaseModel):
    message: str
    item: LostItemRead


class DashboardStats(BaseModel):
    active_by_status: dict[str, int]
    active_total: int
    delivered_total: int
    delivered_archived: int
    found_today: int
    found_last_7_days: int
