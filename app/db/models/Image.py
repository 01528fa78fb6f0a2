# app/db/models/Image.py
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.db.models.ImageCategory import image_category_links
from datetime import datetime, timezone


class Image(Base):
    __tablename__ = 'images'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    storage_key = Column(String(512), unique=True, nullable=False, index=True)
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)

    categories = relationship(
        "Category",
        secondary=image_category_links,
        back_populates="images",
        order_by="Category.name",
    )

    @property
    def category_ids(self) -> set:
        return {category.id for category in self.categories}

    def __repr__(self):
        return f"<Image(id={self.id}, storage_key={self.storage_key})>"
