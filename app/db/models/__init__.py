from app.db.models.ImageCategory import image_category_links
from app.db.models.Category import Category, DEFAULT_CATEGORY_NAME
from app.db.models.Image import Image

__all__ = ["Category", "DEFAULT_CATEGORY_NAME", "Image", "image_category_links"]
