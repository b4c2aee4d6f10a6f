"""ImgBB Image Store - Implementation of ImageStorePort over the ImgBB HTTP API.

ImgBB accepts uploads and returns a durable URL, but the free plan exposes no
delete endpoint. `supports_delete` is therefore False and delete_image raises
NotImplementedError; callers check the flag before attempting removal.
"""

import base64
import logging
from typing import Optional

import httpx

from domain.errors import ImageStoreError
from domain.images.ports import ImageStorePort, UploadedImage
from domain.images.validation import sanitize_filename

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_URL = "https://api.imgbb.com/1/upload"


class ImgBBImageStore(ImageStorePort):
    """Upload-only image host backed by ImgBB."""

    supports_delete = False

    def __init__(
        self,
        api_key: Optional[str],
        upload_url: str = DEFAULT_UPLOAD_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._upload_url = upload_url
        self._timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def upload_image(self, content: bytes, filename: str, mime_type: str) -> UploadedImage:
        if not content:
            raise ValueError("Cannot upload empty image")
        if not self._api_key:
            raise ImageStoreError("IMGBB_API_KEY is not configured")

        client = await self._get_client()
        data = {
            "key": self._api_key,
            "image": base64.b64encode(content).decode("ascii"),
            "name": sanitize_filename(filename),
        }

        try:
            response = await client.post(self._upload_url, data=data)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "ImgBB upload rejected",
                extra={"status_code": e.response.status_code, "image_name": filename},
            )
            raise ImageStoreError(f"HTTP error! status: {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error("ImgBB request failed", extra={"error": str(e)})
            raise ImageStoreError(f"Upload request failed: {e}")
        except ValueError as e:
            raise ImageStoreError(f"Invalid response from image host: {e}")

        if not payload.get("success"):
            logger.error("ImgBB upload failed", extra={"response": payload})
            raise ImageStoreError("Upload failed")

        image = payload.get("data") or {}
        url = image.get("url")
        if not url:
            raise ImageStoreError("Upload response did not include an image URL")

        logger.info(f"Uploaded image to ImgBB: {url}")
        return UploadedImage(
            url=url,
            size_bytes=len(content),
            delete_url=image.get("delete_url"),
        )

    async def delete_image(self, url: str) -> bool:
        raise NotImplementedError("ImgBB does not offer an image deletion API on this plan")
