"""Image Store Port - Domain interface for hosted request photos.

Image hosts differ in what they allow: some only accept uploads and hand back
a public URL, others can also delete. The `supports_delete` capability flag
makes that difference explicit so the retention engine can record an image
as processed even when the host offers no way to remove it.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class UploadedImage:
    """Result of a successful upload.

    Attributes:
        url: Durable public URL stored on the request
        size_bytes: Uploaded payload size
        delete_url: Host-provided manual deletion page, if any
    """
    url: str
    size_bytes: int
    delete_url: Optional[str] = None


class ImageStorePort(ABC):
    """Port interface for image hosting.

    Example Usage:
        store = ImgBBImageStore(api_key=...)
        uploaded = await store.upload_image(content, "leak.jpg", "image/jpeg")

        if store.supports_delete:
            await store.delete_image(uploaded.url)
    """

    #: Whether delete_image actually removes images on this host
    supports_delete: bool = False

    @abstractmethod
    async def upload_image(self, content: bytes, filename: str, mime_type: str) -> UploadedImage:
        """Upload an image and return its durable URL.

        Raises:
            ImageStoreError: If the host rejects or fails the upload
            ValueError: If content is empty
        """
        pass

    @abstractmethod
    async def delete_image(self, url: str) -> bool:
        """Remove a previously uploaded image.

        Returns:
            True if the image was removed, False if it was already gone

        Raises:
            ImageStoreError: If deletion fails
            NotImplementedError: If the host does not support deletion
        """
        pass

    async def check_health(self) -> None:
        """Raise if the host is unreachable. Default: nothing to check."""
        return None
