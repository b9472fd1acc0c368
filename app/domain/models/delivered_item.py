"""Delivered item domain model — terminal-phase records, 'delivered_items' table."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class DeliveredItem(Base):
    __tablename__ = "delivered_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Copied from the lost item
    item_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    flight_number = Column(String(20), nullable=False, index=True)
    date_found = Column(DateTime(timezone=True), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    found_by_id = Column(Integer, nullable=False, index=True)
    supervisor_id = Column(Integer, nullable=True)

    # Delivery data
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    customer_identification = Column(String(100), nullable=False)
    signature = Column(Text, nullable=False)
    delivery_notes = Column(Text, nullable=True)
    delivery_photos = Column(JSON, nullable=False, default=list)
    delivered_by_id = Column(Integer, nullable=True)
    date_delivered = Column(DateTime(timezone=True), nullable=False, index=True)
    archived = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<DeliveredItem {self.id} {self.flight_number} - {self.item_name}>"
