from __future__ import annotations
from PIL import Image
import io


ALLOWED_MIME = {"image/jpeg", "image/png", "image/webp"}
_MIME_FOR_FORMAT = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}

def sniff_mime(data: bytes) -> str | None:
    # Pillow reads the header only; no full decode
    try:
        with Image.open(io.BytesIO(data)) as img:
            return _MIME_FOR_FORMAT.get(img.format or "")
    except Exception:
        return None

def validate_image(data: bytes) -> str:
    """
    Return the detected MIME type, or raise ValueError for empty, unreadable
    or unsupported uploads.
    """
    if not data:
        raise ValueError("Empty image")
    mime = sniff_mime(data)
    if mime not in ALLOWED_MIME:
        raise ValueError("Unsupported image type")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()  # basic integrity
    except Exception:
        raise ValueError("Invalid image file")
    return mime
