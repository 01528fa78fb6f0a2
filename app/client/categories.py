import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.client.api import ApiError, MediaApiClient
from app.client.notifications import NotificationLog

logger = logging.getLogger(__name__)


@dataclass
class CategoryManager:
    client: MediaApiClient
    categories: List[dict] = field(default_factory=list)
    deleting_category_id: Optional[int] = None
    notifications: NotificationLog = field(default_factory=NotificationLog)

    async def load(self) -> List[dict]:
        try:
            self.categories = await self.client.list_categories()
        except ApiError as e:
            logger.error(f"Error fetching categories: {e.message}")
            self.notifications.error("Failed to load categories.")
        return self.categories

    async def add(self, name: str) -> Optional[dict]:
        name = name.strip()
        if not name:
            self.notifications.error("Category name cannot be empty.")
            return None

        try:
            category = await self.client.create_category(name)
        except ApiError as e:
            logger.error(f"Error adding category: {e.message}")
            self.notifications.error(e.message or "Failed to add category.")
            return None

        self.categories = sorted(self.categories + [category], key=lambda c: c["name"])
        self.notifications.success("Category added successfully!")
        return category

    async def delete(self, category_id: int) -> bool:
        self.deleting_category_id = category_id
        try:
            await self.client.delete_category(category_id)
        except ApiError as e:
            logger.error(f"Error deleting category: {e.message}")
            self.notifications.error(e.message or "Failed to delete category.")
            return False
        finally:
            self.deleting_category_id = None

        self.categories = [c for c in self.categories if c["id"] != category_id]
        self.notifications.success("Category deleted successfully.")
        return True
