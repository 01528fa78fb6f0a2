# app/schemas/upload.py
from typing import List, Optional

from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    filename: str = Field(min_length=1)
    content_type: str = Field(alias="contentType", min_length=1)
    size: int
    title: Optional[str] = None
    category_ids: Optional[List[int]] = Field(default=None, alias="categoryIds")

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    presigned_url: str = Field(alias="presignedUrl")
    key: str
    image_url: str = Field(alias="imageUrl")

    class Config:
        populate_by_name = True


class DeleteRequest(BaseModel):
    key: str = Field(min_length=1)
