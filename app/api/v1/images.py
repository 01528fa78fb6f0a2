# app/api/v1/images.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.crud import image as image_crud
from app.db.session import get_db
from app.schemas.image import Image, ImageUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_category_id(value: Optional[str]) -> Optional[int]:
    # a non-numeric id means no filter
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@router.get("/images", response_model=List[Image])
def get_images(
    limit: int = Query(image_crud.DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    db: Session = Depends(get_db)
):
    return image_crud.list_images(db, limit=limit, offset=offset, category_id=_parse_category_id(category_id))


@router.patch("/images/{image_id}", response_model=Image)
def update_image(image_id: int, payload: ImageUpdate, db: Session = Depends(get_db)):
    return image_crud.update_image(
        db,
        image_id,
        title=payload.title,
        category_ids=payload.category_ids,
    )
