"""Image bucket bootstrap and uploads on the backend's object storage."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Dict, Optional

from fastapi import status

from .supabase import SupabaseClient, SupabaseError

logger = logging.getLogger(__name__)

IMAGES_BUCKET = "images"
IMAGE_SIZE_LIMIT = 5 * 1024 * 1024

BUCKET_POLICY_SQL = f"""
BEGIN;

DROP POLICY IF EXISTS "Allow authenticated uploads" ON storage.objects;
DROP POLICY IF EXISTS "Allow public viewing of images" ON storage.objects;

CREATE POLICY "Allow authenticated uploads"
ON storage.objects
FOR INSERT
TO authenticated
WITH CHECK (bucket_id = '{IMAGES_BUCKET}' AND auth.uid() = auth.uid());

CREATE POLICY "Allow public viewing of images"
ON storage.objects
FOR SELECT
TO public
USING (bucket_id = '{IMAGES_BUCKET}');

COMMIT;
"""


class StorageError(Exception):
    """Storage operation failed; ``message`` is safe to show to the caller."""

    def __init__(self, message: str, *, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def decode_data_url(data_url: str) -> bytes:
    """Decode the base64 payload of a ``data:image/...;base64,`` URL."""
    _, sep, encoded = data_url.partition(",")
    if not sep or not encoded:
        raise StorageError("Invalid image data", status_code=status.HTTP_400_BAD_REQUEST)
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise StorageError(
            "Invalid image data", status_code=status.HTTP_400_BAD_REQUEST
        ) from exc


class StorageService:
    def __init__(self, client: SupabaseClient, *, access_token: Optional[str] = None) -> None:
        self.client = client
        self.access_token = access_token

    async def _bucket_exists(self) -> bool:
        try:
            buckets = await self.client.list_buckets(access_token=self.access_token)
        except SupabaseError as exc:
            logger.error("Error checking buckets: %s", exc.message)
            raise StorageError("Failed to check storage buckets") from exc
        return any(bucket.get("name") == IMAGES_BUCKET for bucket in buckets)

    async def ensure_images_bucket(self) -> Dict[str, Any]:
        """Create the public images bucket when missing, then apply access policies."""
        exists = await self._bucket_exists()
        created = False

        if not exists:
            try:
                await self.client.create_bucket(
                    IMAGES_BUCKET,
                    public=True,
                    file_size_limit=IMAGE_SIZE_LIMIT,
                    access_token=self.access_token,
                )
            except SupabaseError as exc:
                logger.error("Error creating images bucket: %s", exc.message)
                raise StorageError("Failed to create storage bucket") from exc
            created = True
            logger.info("Created images bucket")

        try:
            await self.client.rpc("exec_sql", {"query": BUCKET_POLICY_SQL})
        except SupabaseError as exc:
            # Non-fatal: the bucket is usable without the policies.
            logger.error("Error setting bucket permissions: %s", exc.message)

        return {"success": True, "bucketExists": exists, "bucketCreated": created}

    async def upload_test_image(self, image_base64: str) -> str:
        """Upload a data-URL image under ``test/`` and return its public URL."""
        # Only checks that storage answers; a missing bucket surfaces on upload.
        await self._bucket_exists()
        data = decode_data_url(image_base64)
        path = f"test/test-{int(time.time() * 1000)}.jpg"
        try:
            stored_path = await self.client.upload_object(
                IMAGES_BUCKET,
                path,
                data,
                content_type="image/jpeg",
                upsert=True,
                access_token=self.access_token,
            )
        except SupabaseError as exc:
            logger.error("Error uploading image: %s", exc.message)
            raise StorageError(exc.message) from exc
        return self.client.public_url(IMAGES_BUCKET, stored_path)


__all__ = [
    "IMAGES_BUCKET",
    "IMAGE_SIZE_LIMIT",
    "StorageError",
    "StorageService",
    "decode_data_url",
]
