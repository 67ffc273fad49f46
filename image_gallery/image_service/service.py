from typing import List, Optional
import asyncio
import logging
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from image_gallery.storage.dynamodb import DynamoDBService
from image_gallery.storage.s3 import S3Service
from image_gallery.image_service.keys import current_millis, generate_key, iso_timestamp, parse_tags
from image_gallery.image_service.models import ImageUpload, ImageListing, ImageMetadata
from image_gallery.exceptions import S3UploadException, DynamoDBException, InvalidUploadException

log = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

class UploadFlow:
    """
        Writes each uploaded file to S3 and then its metadata row to DynamoDB.

        The two writes are not transactional. A failed metadata write leaves
        the blob in place and fails the request.
    """

    def __init__(self, s3: S3Service, db: DynamoDBService):
        self.s3 = s3
        self.db = db

    async def upload_one(
        self,
        file: UploadFile,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> ImageUpload:
        """Stores a single file."""
        results = await self.upload_many([file], title, description, tags)
        return results[0]

    async def upload_many(
        self,
        files: List[UploadFile],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> List[ImageUpload]:
        """Stores every file concurrently, sharing one upload time and the descriptive fields."""
        if not files:
            raise InvalidUploadException("No files were uploaded")

        upload_time = iso_timestamp()
        tag_list = parse_tags(tags)
        return list(await asyncio.gather(*(
            self._store(file, title or "", description or "", tag_list, upload_time)
            for file in files
        )))

    async def _store(
        self,
        file: UploadFile,
        title: str,
        description: str,
        tags: List[str],
        upload_time: str,
    ) -> ImageUpload:
        key = generate_key(current_millis(), file.filename or "upload")
        await file.seek(0)

        try:
            await run_in_threadpool(
                self.s3.upload, file.file, key, file.content_type or DEFAULT_CONTENT_TYPE
            )
        except (BotoCoreError, ClientError) as e:
            log.error("S3 upload failed for %s: %s", key, e)
            raise S3UploadException(f"Failed to upload image to S3: {e}")

        try:
            await run_in_threadpool(self.db.put_metadata, key, title, description, tags, upload_time)
        except (BotoCoreError, ClientError) as e:
            log.error("DynamoDB put_metadata failed for %s: %s", key, e)
            raise DynamoDBException(f"Failed to save image metadata: {e}")

        log.info("Saved image %s", key)
        return ImageUpload(
            image_url=self.s3.object_url(key),
            title=title,
            description=description,
            tags=tags,
            upload_time=upload_time,
        )

class ListingFlow:
    """Joins every object in the bucket with its metadata row."""

    def __init__(self, s3: S3Service, db: DynamoDBService):
        self.s3 = s3
        self.db = db

    async def list_images(self) -> List[ImageListing]:
        try:
            keys = await run_in_threadpool(self.s3.list_keys)
        except (BotoCoreError, ClientError) as e:
            log.error("S3 list_keys failed: %s", e)
            raise S3UploadException(f"Failed to retrieve images: {e}")

        metadata = await asyncio.gather(*(self._fetch_metadata(key) for key in keys))
        return [
            ImageListing(key=key, url=self.s3.object_url(key), metadata=meta)
            for key, meta in zip(keys, metadata)
        ]

    async def _fetch_metadata(self, key: str) -> ImageMetadata:
        try:
            item = await run_in_threadpool(self.db.get_metadata, key)
            if item is None:
                return ImageMetadata()
            return ImageMetadata(**item)
        except (BotoCoreError, ClientError, ValidationError, TypeError) as e:
            # Unreadable rows are shown without metadata
            log.warning("Error fetching metadata for key %s: %s", key, e)
            return ImageMetadata()
