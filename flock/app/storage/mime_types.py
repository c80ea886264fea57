# flock/app/storage/mime_types.py
"""
Content-Type → file extension for uploaded images.

Only image types are accepted: the bytes end up behind an avatar URL.
"""
import mimetypes
from typing import Optional

IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/svg+xml": ".svg",
    "image/x-icon": ".ico",
    "image/vnd.microsoft.icon": ".ico",
    "image/avif": ".avif",
}


class UnknownMimeType(ValueError):
    pass


def base_type(content_type: Optional[str]) -> str:
    """'image/JPEG; charset=binary' → 'image/jpeg'"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def extension_for(content_type: Optional[str]) -> str:
    """
    Raises:
        UnknownMimeType: missing, malformed, non-image or unknown type
    """
    mime = base_type(content_type)
    if not mime:
        raise UnknownMimeType("Missing Content-Type")
    if not mime.startswith("image/"):
        raise UnknownMimeType(f"{mime} is not an image type")

    extension = IMAGE_EXTENSIONS.get(mime) or mimetypes.guess_extension(mime)
    if not extension:
        raise UnknownMimeType(f"Unknown image type {mime}")
    return extension
