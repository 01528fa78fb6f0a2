# app/api/v1/s3.py
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.limiter import limiter
from app.crud import image as image_crud
from app.db.session import get_db
from app.schemas.common import MessageResponse
from app.schemas.upload import DeleteRequest, UploadRequest, UploadResponse
from app.services.storage import StorageGateway, get_storage
from app.services.upload_service import register_upload

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/s3/upload", response_model=UploadResponse)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
def create_upload_url(
    request: Request,
    payload: UploadRequest,
    db: Session = Depends(get_db),
    storage: StorageGateway = Depends(get_storage)
):
    default_category_id = getattr(request.app.state, "default_category_id", None)
    return register_upload(db, storage, payload, default_category_id=default_category_id)


@router.delete("/s3/delete", response_model=MessageResponse)
def delete_uploaded_file(
    payload: DeleteRequest,
    db: Session = Depends(get_db),
    storage: StorageGateway = Depends(get_storage)
):
    image_crud.delete_image(db, storage, payload.key)
    return MessageResponse(message="File deleted successfully from storage and database.")
