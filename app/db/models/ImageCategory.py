# app/db/models/ImageCategory.py
from sqlalchemy import Column, Integer, ForeignKey, Table
from app.db.base import Base

# Plain join table; no ordering and no payload columns
image_category_links = Table(
    'image_category_links',
    Base.metadata,
    Column('image_id', Integer, ForeignKey('images.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', Integer, ForeignKey('image_categories.id', ondelete='CASCADE'), primary_key=True),
)
