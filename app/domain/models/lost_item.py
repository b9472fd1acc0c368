"""Lost item domain model — active (not yet delivered) items, 'lost_items' table."""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class LostItem(Base):
    __tablename__ = "lost_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)

    item_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    flight_number = Column(String(20), nullable=False, index=True)
    date_found = Column(DateTime(timezone=True), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)  # [{public_id, url, thumbnail_url}]
    status = Column(String(20), nullable=False, default="onHand", index=True)

    # User references are not foreign keys: deleting a user must not cascade
    found_by_id = Column(Integer, nullable=False, index=True)
    supervisor_id = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<LostItem {self.id} {self.flight_number} - {self.item_name}>"
