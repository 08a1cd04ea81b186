"""
Object storage for generated artifacts (QR images, PDFs).

WHAT: Uploads bytes to S3 (or an S3-compatible endpoint) and returns the
object URL.

WHY: QR images are small enough to embed as data URLs, but when storage is
enabled the record holds a short URL instead. Storage is a secondary
dependency: callers catch StorageError and fall back.

HOW: boto3 is synchronous; calls run in a worker thread so the event loop
is never blocked.
"""

import asyncio
import io
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage:
    """S3 uploads for QR codes and PDFs."""

    def __init__(self, bucket_name: Optional[str] = None, s3_client=None):
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self._s3_client = s3_client

    @property
    def s3_client(self):
        # Created on first upload so processes without storage never need credentials
        if self._s3_client is None:
            self._s3_client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION,
                endpoint_url=settings.S3_ENDPOINT_URL,
            )
        return self._s3_client

    def object_url(self, key: str) -> str:
        if settings.S3_ENDPOINT_URL:
            return f"{settings.S3_ENDPOINT_URL.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    def _upload(self, key: str, data: bytes, content_type: str) -> None:
        self.s3_client.upload_fileobj(
            io.BytesIO(data),
            self.bucket_name,
            key,
            ExtraArgs={"ContentType": content_type},
        )

    async def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """
        Upload ``data`` under ``key``.

        Returns:
            Public object URL

        Raises:
            StorageError: If the upload fails
        """
        try:
            await asyncio.to_thread(self._upload, key, data, content_type)
        except (ClientError, BotoCoreError) as e:
            logger.warning(
                f"S3 upload failed for {key}: {type(e).__name__}",
                extra={"s3_key": key, "bucket": self.bucket_name},
            )
            raise StorageError(message="Failed to upload object", s3_key=key, error=str(e))

        logger.info(f"Uploaded {key} to {self.bucket_name}", extra={"s3_key": key})
        return self.object_url(key)


_object_storage: Optional[ObjectStorage] = None


def get_object_storage() -> ObjectStorage:
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage()
    return _object_storage
