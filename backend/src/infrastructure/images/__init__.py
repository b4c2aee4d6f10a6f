"""Image store adapters and the factory selecting one from settings."""

from config import Settings
from domain.images.ports import ImageStorePort

from .imgbb_image_store import ImgBBImageStore
from .s3_image_store import S3ImageStore


def create_image_store(settings: Settings) -> ImageStorePort:
    """Build the image store named by IMAGE_STORE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.IMAGE_STORE_BACKEND.lower()

    if backend == "imgbb":
        return ImgBBImageStore(
            api_key=settings.IMGBB_API_KEY,
            upload_url=settings.IMGBB_UPLOAD_URL,
            timeout=settings.IMGBB_TIMEOUT_SECONDS,
        )

    if backend == "s3":
        return S3ImageStore(
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key=settings.S3_ACCESS_KEY_ID,
            secret_key=settings.S3_SECRET_ACCESS_KEY,
            bucket_name=settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )

    raise ValueError(f"Unknown IMAGE_STORE_BACKEND: {settings.IMAGE_STORE_BACKEND}")


__all__ = ["ImgBBImageStore", "S3ImageStore", "create_image_store"]
