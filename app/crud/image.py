import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.crud.category import get_categories_by_ids
from app.db.models.Category import Category
from app.db.models.Image import Image
from app.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 100


def list_images(
    db: Session,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    category_id: Optional[int] = None,
) -> List[Image]:
    """
    Return one page of images, newest first.

    No total count is computed; a page shorter than ``limit`` means there is
    nothing after it. ``limit`` is capped at ``MAX_PAGE_SIZE``.
    """
    limit = min(limit, MAX_PAGE_SIZE)
    query = db.query(Image).options(selectinload(Image.categories))
    if category_id is not None:
        query = query.filter(Image.categories.any(Category.id == category_id))

    return (
        query.order_by(Image.created_at.desc(), Image.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_image(db: Session, image_id: int) -> Optional[Image]:
    return db.get(Image, image_id)


def get_image_by_key(db: Session, storage_key: str) -> Optional[Image]:
    return db.query(Image).filter(Image.storage_key == storage_key).first()


def create_image(db: Session, title: str, storage_key: str, url: str, categories: Iterable[Category]) -> Image:
    image = Image(title=title, storage_key=storage_key, url=url, categories=list(categories))
    db.add(image)
    db.commit()
    db.refresh(image)
    logger.info(f"Recorded image {image.id} for key {storage_key}")
    return image


def update_image(
    db: Session,
    image_id: int,
    title: Optional[str] = None,
    category_ids: Optional[Iterable[int]] = None,
) -> Image:
    image = get_image(db, image_id)
    if not image:
        raise NotFoundError("Image not found.", details={"id": image_id})

    if title is not None:
        if not title.strip():
            raise ValidationError(
                "Title cannot be empty.",
                details=[{"loc": ["title"], "msg": "Title cannot be empty.", "type": "value_error"}]
            )
        image.title = title

    if category_ids is not None:
        wanted = set(category_ids)
        current = image.category_ids

        to_connect = get_categories_by_ids(db, wanted - current)
        to_disconnect = current - wanted

        # unchanged links are left alone
        for category in list(image.categories):
            if category.id in to_disconnect:
                image.categories.remove(category)
        image.categories.extend(to_connect)

        if to_connect or to_disconnect:
            logger.info(
                f"Image {image_id}: connected {sorted(c.id for c in to_connect)}, "
                f"disconnected {sorted(to_disconnect)}"
            )

    db.commit()
    db.refresh(image)
    return image


def delete_image(db: Session, storage, storage_key: str) -> int:
    """
    Delete the image row, then its storage object.

    A storage failure after the row is gone leaves an orphaned object behind;
    the maintenance sweep removes those.
    """
    image = get_image_by_key(db, storage_key)
    if not image:
        raise NotFoundError("Image not found in database or already deleted.", details={"key": storage_key})

    image_id = image.id
    db.delete(image)
    db.commit()
    logger.info(f"Deleted image row {image_id} for key {storage_key}")

    storage.delete_object(storage_key)
    return image_id
