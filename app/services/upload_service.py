import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.crud.category import ensure_default_category, get_categories_by_ids
from app.crud.image import create_image
from app.db.models.Category import Category
from app.exceptions import ValidationError
from app.schemas.upload import UploadRequest, UploadResponse
from app.services.storage import StorageGateway
from app.utils.validation import format_size, is_image_content_type

logger = logging.getLogger(__name__)


def validate_upload_request(upload: UploadRequest) -> None:
    errors = []
    if not is_image_content_type(upload.content_type):
        errors.append({"loc": ["contentType"], "msg": "Only image uploads are accepted", "type": "value_error"})
    if upload.size <= 0:
        errors.append({"loc": ["size"], "msg": "File size must be greater than zero", "type": "value_error"})
    elif upload.size > settings.max_upload_size_bytes:
        errors.append({
            "loc": ["size"],
            "msg": f"File size {format_size(upload.size)} exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB limit",
            "type": "value_error",
        })
    if errors:
        raise ValidationError("Invalid request body", details=errors)


def resolve_upload_categories(db: Session, upload: UploadRequest, default_category_id: Optional[int]) -> list:
    if upload.category_ids:
        return get_categories_by_ids(db, upload.category_ids)

    default_category = db.get(Category, default_category_id) if default_category_id else None
    if default_category is None:
        default_category = ensure_default_category(db)
    return [default_category]


def register_upload(
    db: Session,
    storage: StorageGateway,
    upload: UploadRequest,
    default_category_id: Optional[int] = None,
) -> UploadResponse:
    """
    Issue a presigned PUT URL and record the image it will hold.

    The row is written up front so the client only has to push bytes; until
    that PUT completes the row points at an object that does not exist yet.
    """
    validate_upload_request(upload)
    categories = resolve_upload_categories(db, upload, default_category_id)

    presigned = storage.issue_upload_url(upload.filename, upload.content_type, upload.size)
    create_image(
        db,
        title=upload.title or upload.filename,
        storage_key=presigned.key,
        url=presigned.public_url,
        categories=categories,
    )

    return UploadResponse(
        presigned_url=presigned.presigned_url,
        key=presigned.key,
        image_url=presigned.public_url,
    )
