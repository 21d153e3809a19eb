# rotamax/images.py
"""Profile photo encoding: raw upload -> self-contained ``data:`` URL."""

from __future__ import annotations

import base64

from rotamax.errors import ValidationRejected
from rotamax.logging_utils import get_logger

LOGGER = get_logger(__name__)

MAX_IMAGE_BYTES = 500 * 1024
ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg"}


def encode_profile_image(raw: bytes, content_type: str | None) -> str:
    """Return ``raw`` as a base64 data URL, or raise ValidationRejected.

    The size check runs before any encoding so an oversized file never
    reaches the store.
    """
    size = len(raw or b"")
    if size > MAX_IMAGE_BYTES:
        LOGGER.info("Rejected profile image of %s bytes", size)
        raise ValidationRejected("ERROR: The image is too large. Use an image smaller than 500KB.")
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    if mime not in ALLOWED_CONTENT_TYPES:
        raise ValidationRejected("ERROR: Only PNG and JPEG images are accepted.")
    if size == 0:
        raise ValidationRejected("ERROR: Could not read the image file.")
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"
