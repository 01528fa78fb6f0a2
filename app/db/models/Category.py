# app/db/models/Category.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.db.models.ImageCategory import image_category_links

DEFAULT_CATEGORY_NAME = "Uncategorized"


class Category(Base):
    __tablename__ = 'image_categories'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)

    images = relationship("Image", secondary=image_category_links, back_populates="categories")

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"
