# app/utils/validation.py
import re

IMAGE_CONTENT_TYPE_PREFIX = "image/"
MAX_FILENAME_LENGTH = 200


def is_image_content_type(content_type: str) -> bool:
    return bool(content_type) and content_type.lower().startswith(IMAGE_CONTENT_TYPE_PREFIX)


def sanitize_filename(filename: str) -> str:
    """
    Make a filename safe to use inside an object key.

    Spaces become underscores and anything other than letters, digits, `_`
    and `-` is dropped from the stem. The extension is kept as given.
    """
    if not filename:
        return "unnamed_file"

    # keep only the last path segment
    filename = re.split(r'[\\/]', filename)[-1]

    name_parts = filename.rsplit('.', 1)
    name = name_parts[0]
    extension = name_parts[1] if len(name_parts) > 1 else ""

    name = name.replace(' ', '_')
    name = re.sub(r'[^\w\-]', '', name)
    extension = re.sub(r'[^\w]', '', extension)

    if not name:
        name = "unnamed_file"

    if len(name) + len(extension) + 1 > MAX_FILENAME_LENGTH:
        name = name[:MAX_FILENAME_LENGTH - len(extension) - 1]

    if extension:
        return f"{name}.{extension}"
    return name


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    elif size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    elif size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MB"
    else:
        return f"{size / (1024 * 1024 * 1024):.2f} GB"
