import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.core.celery_app import celery_app
from app.db.models.Image import Image
from app.db.session import SessionLocal
from app.exceptions import StorageError
from app.services.storage import StorageGateway, get_storage

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def sweep_orphaned_objects(
    db: Session,
    storage: StorageGateway,
    grace_seconds: int,
    now: Optional[datetime] = None,
) -> dict:
    """
    Delete storage objects that no image row refers to.

    Objects younger than ``grace_seconds`` are skipped: they may belong to an
    upload whose presigned URL is still live.
    """
    cutoff = _as_utc(now or datetime.now(timezone.utc)) - timedelta(seconds=grace_seconds)

    checked_count = 0
    deleted_count = 0
    failed_count = 0

    for key, last_modified in storage.iter_objects():
        checked_count += 1
        if _as_utc(last_modified) > cutoff:
            continue

        exists = db.query(Image.id).filter(Image.storage_key == key).first()
        if exists:
            continue

        try:
            storage.delete_object(key)
            deleted_count += 1
            logger.info(f"Deleted orphaned object {key}")
        except StorageError as e:
            failed_count += 1
            logger.error(f"Error deleting orphaned object {key}: {e.message}")

    logger.info(
        f"Orphan sweep finished: checked {checked_count}, deleted {deleted_count}, failed {failed_count}"
    )
    return {
        "checked_files": checked_count,
        "deleted_files": deleted_count,
        "failed_files": failed_count,
    }


@celery_app.task(name="cleanup_orphaned_files")
def cleanup_orphaned_files():
    logger.info("Starting orphaned file cleanup")
    try:
        with SessionLocal() as db:
            result = sweep_orphaned_objects(db, get_storage(), settings.ORPHAN_SWEEP_GRACE_SECONDS)
        return {"success": True, **result, "timestamp": datetime.now(timezone.utc).isoformat()}
    except StorageError as e:
        logger.error(f"Orphaned file cleanup failed: {e.message}")
        return {
            "success": False,
            "error": e.message,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
