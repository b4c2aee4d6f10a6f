"""Images domain module - photo validation and the image store port"""

from .validation import (
    SUPPORTED_IMAGE_TYPES,
    MAX_IMAGE_SIZE,
    is_supported_image_type,
    validate_image_size,
    sanitize_filename,
)

__all__ = [
    "SUPPORTED_IMAGE_TYPES",
    "MAX_IMAGE_SIZE",
    "is_supported_image_type",
    "validate_image_size",
    "sanitize_filename",
]
