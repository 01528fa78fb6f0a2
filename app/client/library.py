import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.client.api import ApiError, MediaApiClient
from app.client.notifications import NotificationLog

logger = logging.getLogger(__name__)

IMAGES_PER_LOAD = 15


@dataclass
class LibraryBrowser:
    """
    Paginated, filterable view over the image library.

    The API returns no totals, so ``has_more`` is inferred: a full page means
    there may be more, a short page means the end was reached.
    """

    client: MediaApiClient
    page_size: int = IMAGES_PER_LOAD
    category_id: Optional[int] = None
    images: List[dict] = field(default_factory=list)
    categories: List[dict] = field(default_factory=list)
    offset: int = 0
    has_more: bool = True
    deleting_image_id: Optional[int] = None
    notifications: NotificationLog = field(default_factory=NotificationLog)

    async def load_categories(self) -> List[dict]:
        try:
            self.categories = await self.client.list_categories()
        except ApiError as e:
            logger.error(f"Error fetching categories for filter: {e.message}")
            self.notifications.error("Failed to load categories for filtering.")
        return self.categories

    async def _fetch(self, offset: int, append: bool) -> List[dict]:
        try:
            page = await self.client.list_images(limit=self.page_size, offset=offset, category_id=self.category_id)
        except ApiError as e:
            logger.error(f"Error fetching images: {e.message}")
            self.notifications.error("Failed to load media library.")
            return []

        self.images = self.images + page if append else page
        self.has_more = len(page) == self.page_size
        self.offset = offset + len(page)
        return page

    async def refresh(self) -> List[dict]:
        self.images = []
        self.offset = 0
        self.has_more = True
        return await self._fetch(0, append=False)

    async def open(self) -> List[dict]:
        await self.load_categories()
        return await self.refresh()

    async def load_more(self) -> List[dict]:
        if not self.has_more:
            return []
        return await self._fetch(self.offset, append=True)

    async def set_filter(self, category_id: Optional[int]) -> List[dict]:
        self.category_id = category_id
        return await self.refresh()

    async def delete_image(self, image: dict) -> bool:
        self.deleting_image_id = image["id"]
        try:
            await self.client.delete_image(image["storageKey"])
        except ApiError as e:
            logger.error(f"Error deleting image: {e.message}")
            self.notifications.error("Failed to delete image.")
            return False
        finally:
            self.deleting_image_id = None

        self.images = [img for img in self.images if img["id"] != image["id"]]
        self.notifications.success("Image deleted successfully.")
        return True

    async def update_image(self, image_id: int, title: Optional[str] = None,
                           category_ids: Optional[List[int]] = None) -> Optional[dict]:
        try:
            updated = await self.client.update_image(image_id, title=title, category_ids=category_ids)
        except ApiError as e:
            logger.error(f"Error updating image: {e.message}")
            self.notifications.error(e.message or "Failed to update image.")
            return None

        self.images = [updated if img["id"] == image_id else img for img in self.images]
        self.notifications.success("Image details updated successfully!")
        return updated

    def select_image(self, image: dict) -> str:
        self.notifications.success("Image selected from media library!")
        return image["url"]
