"""
Client-side upload pipeline.

Each accepted file moves through its own state machine::

    queued -> optimizing -> uploading -> uploaded | error

with ``is_deleting`` as a sub-state of ``uploaded``. Files in one batch run
concurrently and never wait on, or fail because of, one another.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from app.client.api import ApiError, MediaApiClient
from app.client.notifications import NotificationLog
from app.client.optimizer import OptimizationError, optimize_image
from app.utils.validation import is_image_content_type

logger = logging.getLogger(__name__)

MAX_FILES_PER_BATCH = 5
MAX_FILE_SIZE = 10 * 1024 * 1024

TOO_MANY_FILES = "too-many-files"
FILE_TOO_LARGE = "file-too-large"
FILE_INVALID_TYPE = "file-invalid-type"

REJECTION_MESSAGES = {
    TOO_MANY_FILES: f"Too many files selected, max is {MAX_FILES_PER_BATCH}",
    FILE_TOO_LARGE: "File size exceeds 10mb limit",
    FILE_INVALID_TYPE: "Only image files are accepted",
}


class FileState(str, Enum):
    QUEUED = "queued"
    OPTIMIZING = "optimizing"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    ERROR = "error"


@dataclass
class LocalFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class Rejection:
    filename: str
    code: str


@dataclass
class UploadItem:
    original: LocalFile
    category_ids: List[int] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: FileState = FileState.QUEUED
    filename: str = ""
    content_type: str = ""
    data: bytes = b""
    progress: int = 0
    key: Optional[str] = None
    image_url: Optional[str] = None
    error: bool = False
    is_deleting: bool = False

    def __post_init__(self):
        self.filename = self.filename or self.original.name
        self.content_type = self.content_type or self.original.content_type
        self.data = self.data or self.original.data


@dataclass
class UploadSession:
    """All mutable uploader state; passed explicitly to every pipeline call."""

    selected_category_ids: List[int] = field(default_factory=list)
    items: List[UploadItem] = field(default_factory=list)
    notifications: NotificationLog = field(default_factory=NotificationLog)
    max_width: int = 1920
    quality: int = 80

    def get(self, item_id: str) -> Optional[UploadItem]:
        return next((item for item in self.items if item.id == item_id), None)


def accept_files(session: UploadSession, files: Iterable[LocalFile]) -> List[Rejection]:
    """
    Queue the acceptable files of one drop and report the rest.

    Type and size are checked per file; past the batch limit every further
    file is rejected as too many. One notification is raised per rejection
    kind, and rejected files never reach the server.
    """
    rejections = []
    accepted = []
    for file in files:
        if not is_image_content_type(file.content_type):
            rejections.append(Rejection(file.name, FILE_INVALID_TYPE))
        elif file.size > MAX_FILE_SIZE:
            rejections.append(Rejection(file.name, FILE_TOO_LARGE))
        elif len(accepted) >= MAX_FILES_PER_BATCH:
            rejections.append(Rejection(file.name, TOO_MANY_FILES))
        else:
            # categories are captured at queue time
            accepted.append(UploadItem(original=file, category_ids=list(session.selected_category_ids)))

    session.items.extend(accepted)

    for code in (TOO_MANY_FILES, FILE_TOO_LARGE, FILE_INVALID_TYPE):
        if any(rejection.code == code for rejection in rejections):
            session.notifications.error(REJECTION_MESSAGES[code])

    return rejections


def _fail(session: UploadSession, item: UploadItem, message: str):
    item.state = FileState.ERROR
    item.error = True
    item.progress = 0
    session.notifications.error(message)


async def process_item(session: UploadSession, client: MediaApiClient, item: UploadItem) -> UploadItem:
    """Run one file through optimize, presign and PUT. Failures only mark this item."""
    try:
        return await _run_pipeline(session, client, item)
    except Exception as e:
        logger.exception(f"Unexpected error processing {item.original.name}: {e}")
        _fail(session, item, "Something went wrong during upload.")
        return item


async def _run_pipeline(session: UploadSession, client: MediaApiClient, item: UploadItem) -> UploadItem:
    item.state = FileState.OPTIMIZING
    try:
        optimized = await asyncio.to_thread(
            optimize_image, item.original.data, item.original.name, item.original.content_type,
            session.max_width, session.quality,
        )
    except OptimizationError as e:
        logger.error(f"Error optimizing image: {e}")
        _fail(session, item, f"Failed to optimize {item.original.name}")
        return item

    item.filename = optimized.filename
    item.content_type = optimized.content_type
    item.data = optimized.data

    item.state = FileState.UPLOADING
    try:
        presigned = await client.request_upload_url(
            item.filename,
            item.content_type,
            len(item.data),
            title=item.filename,
            category_ids=item.category_ids,
        )
    except ApiError as e:
        logger.error(f"Error requesting upload URL for {item.filename}: {e.message}")
        _fail(session, item, "Failed to get presigned URL")
        return item

    item.key = presigned["key"]

    def on_progress(percent: int):
        item.progress = percent

    try:
        await client.put_object(presigned["presignedUrl"], item.data, item.content_type, on_progress)
    except ApiError as e:
        logger.error(f"Error during upload process: {e.message}")
        _fail(session, item, "Something went wrong during upload.")
        return item

    item.state = FileState.UPLOADED
    item.progress = 100
    item.error = False
    item.image_url = presigned["imageUrl"]
    session.notifications.success("File uploaded successfully")
    return item


async def upload_batch(session: UploadSession, client: MediaApiClient,
                       items: Optional[List[UploadItem]] = None) -> List[UploadItem]:
    if items is None:
        items = [item for item in session.items if item.state == FileState.QUEUED]
    return list(await asyncio.gather(*(process_item(session, client, item) for item in items)))


async def upload_files(session: UploadSession, client: MediaApiClient,
                       files: Iterable[LocalFile]) -> List[UploadItem]:
    """Accept one drop of files and run the pipeline for everything queued."""
    accept_files(session, files)
    return await upload_batch(session, client)


async def remove_item(session: UploadSession, client: MediaApiClient, item_id: str) -> bool:
    """
    Delete an uploaded file from storage and drop it from the session.

    On failure the item stays in view, back in ``uploaded`` with the error
    flag set so the user can retry.
    """
    item = session.get(item_id)
    if item is None:
        logger.warning(f"File to remove not found in session: {item_id}")
        return False

    if item.state in (FileState.OPTIMIZING, FileState.UPLOADING) or item.is_deleting:
        return False

    if item.key is None:
        # no record was ever created for it
        session.items.remove(item)
        return True

    item.is_deleting = True
    try:
        await client.delete_image(item.key)
    except ApiError as e:
        logger.error(f"Error during file removal: {e.message}")
        item.is_deleting = False
        item.error = True
        session.notifications.error("Failed to remove file from storage.")
        return False

    session.items.remove(item)
    session.notifications.success("File removed successfully")
    return True
