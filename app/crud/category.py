import logging
from typing import Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.Category import Category, DEFAULT_CATEGORY_NAME
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name.asc()).all()


def get_category_by_name(db: Session, name: str) -> Category:
    return db.query(Category).filter(Category.name == name).first()


def get_categories_by_ids(db: Session, category_ids: Iterable[int]) -> List[Category]:
    wanted = set(category_ids)
    if not wanted:
        return []

    categories = db.query(Category).filter(Category.id.in_(wanted)).all()
    missing = sorted(wanted - {category.id for category in categories})
    if missing:
        raise ValidationError(
            "Unknown category ids.",
            details=[{"loc": ["categoryIds"], "msg": f"Category {category_id} does not exist", "type": "value_error"}
                     for category_id in missing]
        )
    return categories


def create_category(db: Session, name: str) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError(
            "Category name cannot be empty.",
            details=[{"loc": ["name"], "msg": "Category name cannot be empty.", "type": "value_error"}]
        )

    if get_category_by_name(db, name):
        raise ConflictError("Category with this name already exists.", details={"name": name})

    new_category = Category(name=name)
    db.add(new_category)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request created the same name between lookup and insert
        db.rollback()
        raise ConflictError("Category with this name already exists.", details={"name": name})
    db.refresh(new_category)

    logger.info(f"Created category {new_category.id} ({new_category.name})")
    return new_category


def delete_category(db: Session, category_id: int) -> None:
    """
    Delete a category and its image links. Images themselves are untouched.

    The default category is checked first so it stays protected no matter
    which id it happens to hold.
    """
    default_category = get_category_by_name(db, DEFAULT_CATEGORY_NAME)
    if default_category and default_category.id == category_id:
        raise ForbiddenError(f"The '{DEFAULT_CATEGORY_NAME}' category cannot be deleted.")

    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found or already deleted.", details={"id": category_id})

    db.delete(category)
    db.commit()
    logger.info(f"Deleted category {category_id}")


def ensure_default_category(db: Session) -> Category:
    category = get_category_by_name(db, DEFAULT_CATEGORY_NAME)
    if category:
        return category

    category = Category(name=DEFAULT_CATEGORY_NAME)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return get_category_by_name(db, DEFAULT_CATEGORY_NAME)
    db.refresh(category)

    logger.info(f"Created default category '{DEFAULT_CATEGORY_NAME}' with id {category.id}")
    return category
