import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

logger = logging.getLogger(__name__)

# HEIC/HEIF photos decode like any other format
register_heif_opener()

DEFAULT_MAX_WIDTH = 1920
DEFAULT_QUALITY = 80
WEBP_CONTENT_TYPE = "image/webp"

# Re-encoding would flatten vector art and drop animation frames
PASSTHROUGH_CONTENT_TYPES = ("image/svg+xml", "image/gif")


class OptimizationError(Exception):
    pass


@dataclass
class OptimizedImage:
    data: bytes
    filename: str
    content_type: str
    optimized: bool = True


def webp_filename(filename: str) -> str:
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{stem}.webp"


def optimize_image(data: bytes, filename: str, content_type: str,
                   max_width: int = DEFAULT_MAX_WIDTH, quality: int = DEFAULT_QUALITY) -> OptimizedImage:
    """
    Shrink an image to ``max_width`` and re-encode it as WebP.

    SVG, GIF and animated images come back untouched with ``optimized`` set
    to False. Aspect ratio is preserved; narrower images keep their size.
    """
    if content_type in PASSTHROUGH_CONTENT_TYPES:
        return OptimizedImage(data, filename, content_type, optimized=False)

    try:
        with Image.open(io.BytesIO(data)) as img:
            if getattr(img, "is_animated", False):
                return OptimizedImage(data, filename, content_type, optimized=False)

            img.load()
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() or "transparency" in img.info else "RGB")

            width, height = img.size
            if width > max_width:
                height = round(height * max_width / width)
                width = max_width
                img = img.resize((width, height), Image.Resampling.LANCZOS)

            output = io.BytesIO()
            img.save(output, format="WEBP", quality=quality)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise OptimizationError(f"Could not optimize {filename}: {e}") from e

    optimized = OptimizedImage(output.getvalue(), webp_filename(filename), WEBP_CONTENT_TYPE)
    logger.debug(f"Optimized {filename}: {len(data)} -> {len(optimized.data)} bytes ({width}x{height})")
    return optimized
