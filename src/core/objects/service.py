"""
Object lifecycle coordination.

Create and delete each touch two external systems: the blob store for
the image and the document store for the record. This module sequences
those steps and applies the compensating action when the second step
fails after the first succeeded. It is framework-agnostic and doesn't
know about HTTP, MongoDB, or S3.
"""

import logging
from typing import Optional, Protocol

from .errors import InternalError, NotFoundError
from .models import CreateObjectRequest, ObjectRecord, UploadedImage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class BlobStore(Protocol):
    """Interface for image storage."""

    async def upload(self, data: bytes, content_type: str, original_name: str) -> str:
        """Store bytes and return their public URL."""
        ...

    async def delete(self, public_url: str) -> None:
        """Delete by public URL. Never raises."""
        ...


class ObjectRepository(Protocol):
    """Interface for object record persistence."""

    async def insert(self, record: ObjectRecord) -> ObjectRecord:
        ...

    async def list_all(self) -> list[ObjectRecord]:
        ...

    async def find_by_id(self, object_id: str) -> ObjectRecord:
        ...

    async def delete_by_id(self, object_id: str) -> None:
        ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ObjectService:
    """
    Coordinates the object lifecycle across storage and persistence.

    Steps within one call run strictly in sequence. There are no retries:
    a failed upload or insert fails the whole operation.
    """

    def __init__(self, repository: ObjectRepository, storage: BlobStore) -> None:
        self._repository = repository
        self._storage = storage

    async def create(
        self,
        request: CreateObjectRequest,
        image: Optional[UploadedImage] = None,
    ) -> ObjectRecord:
        """
        Create an object, uploading its image first when one is given.

        If the insert fails after the upload succeeded, the uploaded blob
        is deleted and the original insert error is re-raised unchanged.
        """
        image_url: Optional[str] = None

        if image is not None:
            image_url = await self._storage.upload(
                image.data,
                image.content_type,
                image.filename,
            )

        record = ObjectRecord(
            title=request.title,
            description=request.description,
            image_url=image_url,
        )

        try:
            created = await self._repository.insert(record)
        except Exception as e:
            if image_url:
                logger.warning(
                    "Insert failed after upload, deleting uploaded image",
                    extra={"object_id": record.id, "image_url": image_url, "error": str(e)}
                )
                await self._storage.delete(image_url)
            raise

        logger.info(
            "Object created",
            extra={"object_id": created.id, "has_image": created.has_image}
        )

        return created

    async def list_all(self) -> list[ObjectRecord]:
        """All objects, newest first."""
        return await self._repository.list_all()

    async def get(self, object_id: str) -> ObjectRecord:
        return await self._repository.find_by_id(object_id)

    async def delete(self, object_id: str) -> None:
        """
        Delete an object and, best effort, its image.

        The record is removed first. A failed image delete leaves an
        orphaned blob, which the storage client logs with its URL.
        """
        record = await self._repository.find_by_id(object_id)

        try:
            await self._repository.delete_by_id(object_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"object_id": object_id, "error": str(e)}
            )
            raise InternalError("Failed to delete object") from e

        if record.image_url:
            await self._storage.delete(record.image_url)

        logger.info("Object deleted", extra={"object_id": object_id})
