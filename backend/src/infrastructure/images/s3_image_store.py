"""S3 Image Store - Implementation of ImageStorePort using boto3.

Stores request photos in an S3-compatible bucket (AWS S3, MinIO). Unlike the
ImgBB plan this host can delete, so retention sweeps really free storage.

Storage key format: images/{year}/{month}/{uuid}{ext}. Every upload gets its
own object, so deleting one request's photo never touches another request's,
even when the bytes are identical. boto3 calls run in the threadpool.
Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
import uuid
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import ClientError, NoCredentialsError
from fastapi.concurrency import run_in_threadpool

from domain.errors import ImageStoreError
from domain.images.ports import ImageStorePort, UploadedImage
from domain.images.validation import sanitize_filename

logger = logging.getLogger(__name__)

KEY_PREFIX = "images"


class S3ImageStore(ImageStorePort):
    """S3-compatible image store using boto3.

    Example:
        store = S3ImageStore(
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            bucket_name="maintdesk-images",
        )
        uploaded = await store.upload_image(content, "leak.jpg", "image/jpeg")
        await store.delete_image(uploaded.url)
    """

    supports_delete = True

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
    ):
        """Initialize S3 image store.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: Bucket holding request photos
            region: AWS region
            public_base_url: Base URL images are served from. Defaults to
                the virtual-hosted AWS URL or the path-style endpoint URL.

        Raises:
            ImageStoreError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except NoCredentialsError as e:
            raise ImageStoreError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise ImageStoreError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region

        if public_base_url:
            self.public_base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self.public_base_url = f"{endpoint_url.rstrip('/')}/{bucket_name}"
        else:
            self.public_base_url = f"https://{bucket_name}.s3.{region}.amazonaws.com"

        logger.info(
            f"Initialized S3 image store: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    async def upload_image(self, content: bytes, filename: str, mime_type: str) -> UploadedImage:
        if not content:
            raise ValueError("Cannot upload empty image")

        storage_key = self._generate_storage_key(filename)
        metadata = {
            "original_filename": sanitize_filename(filename),
            "sha256": hashlib.sha256(content).hexdigest(),
        }

        try:
            await run_in_threadpool(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(content),
                ContentType=mime_type,
                Metadata=metadata,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 upload failed: storage_key={storage_key}, error={error_code}")
            raise ImageStoreError(f"Failed to upload image: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise ImageStoreError(f"Failed to upload image: {e}")

        logger.info(f"Uploaded image: storage_key={storage_key}, size={len(content)}")
        return UploadedImage(
            url=f"{self.public_base_url}/{storage_key}",
            size_bytes=len(content),
        )

    async def delete_image(self, url: str) -> bool:
        storage_key = self.storage_key_from_url(url)
        return await run_in_threadpool(self._delete_object, storage_key)

    async def check_health(self) -> None:
        try:
            await run_in_threadpool(self.s3_client.head_bucket, Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise ImageStoreError(f"Bucket check failed: {error_code}")

    def storage_key_from_url(self, url: str) -> str:
        """Map a public image URL back to its object key.

        Raises:
            ImageStoreError: If the URL was not issued by this store
        """
        prefix = f"{self.public_base_url}/"
        if url.startswith(prefix):
            return unquote(url[len(prefix):])

        # Fall back to the path: ".../<bucket>/images/..." or "/images/..."
        path = unquote(urlparse(url).path).lstrip("/")
        if path.startswith(f"{self.bucket_name}/"):
            path = path[len(self.bucket_name) + 1:]
        if path.startswith(f"{KEY_PREFIX}/"):
            return path

        raise ImageStoreError(f"URL does not belong to bucket {self.bucket_name}: {url}")

    def _delete_object(self, storage_key: str) -> bool:
        try:
            try:
                self.s3_client.head_object(Bucket=self.bucket_name, Key=storage_key)
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                if error_code in ("404", "NoSuchKey", "NotFound"):
                    logger.debug(f"Image already gone: storage_key={storage_key}")
                    return False
                raise

            self.s3_client.delete_object(Bucket=self.bucket_name, Key=storage_key)
            logger.info(f"Deleted image: storage_key={storage_key}")
            return True

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"S3 deletion failed: storage_key={storage_key}, error={error_code}")
            raise ImageStoreError(f"Failed to delete image: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during deletion: {e}")
            raise ImageStoreError(f"Failed to delete image: {e}")

    def _generate_storage_key(self, filename: str) -> str:
        """Generate storage key in format: images/{year}/{month}/{uuid}{ext}"""
        now = datetime.now(timezone.utc)
        ext = Path(sanitize_filename(filename)).suffix.lower()
        return f"{KEY_PREFIX}/{now.year}/{now.month:02d}/{uuid.uuid4().hex}{ext}"
