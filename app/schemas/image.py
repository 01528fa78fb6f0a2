# app/schemas/image.py
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.category import Category


class Image(BaseModel):
    id: int
    title: str
    storage_key: str = Field(alias="storageKey")
    url: str
    created_at: datetime = Field(alias="createdAt")
    categories: List[Category] = []

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values; stored times are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    class Config:
        from_attributes = True
        populate_by_name = True


class ImageUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    category_ids: Optional[List[int]] = Field(default=None, alias="categoryIds")

    class Config:
        populate_by_name = True
