"""Validation helpers for request photo uploads"""

import os
import re
from typing import Optional, Tuple


SUPPORTED_IMAGE_TYPES = {
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'image/bmp',
}

# ImgBB rejects anything above 32 MB
MAX_IMAGE_SIZE = 32 * 1024 * 1024


def is_supported_image_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is an accepted image format

    Example:
        >>> is_supported_image_type('image/png')
        True
        >>> is_supported_image_type('application/pdf')
        False
    """
    return mime_type in SUPPORTED_IMAGE_TYPES


def validate_image_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate image size is within limits

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_image_size(1024)
        (True, None)
        >>> validate_image_size(0)
        (False, 'Image is empty (0 bytes)')
    """
    if max_size is None:
        max_size = MAX_IMAGE_SIZE

    if size_bytes == 0:
        return False, "Image is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"Image exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def sanitize_filename(filename: Optional[str]) -> str:
    """Sanitize an uploaded filename for use as an object name

    Example:
        >>> sanitize_filename('../../leak photo.jpg')
        'leak_photo.jpg'
    """
    if not filename:
        return "image"

    filename = os.path.basename(filename.replace('\\', '/'))
    filename = re.sub(r'[^\w\s.-]', '_', filename)
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:255 - len(ext)] + ext

    return filename or "image"
