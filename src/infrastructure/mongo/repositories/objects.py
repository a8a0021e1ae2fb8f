"""
MongoDB repository for object records.

This module implements the repository pattern for object data access.
The repository:
1. Translates between domain records and MongoDB documents
2. Encapsulates all queries and index definitions
3. Assigns server timestamps on insert

The application code never builds a query directly - it asks the
repository for what it needs in domain terms.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pymongo import DESCENDING

from src.core.objects.errors import NotFoundError
from src.core.objects.models import ObjectRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # BSON dates carry no zone; a non tz_aware client returns naive UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _not_found(object_id: str) -> NotFoundError:
    return NotFoundError(f"Object with ID {object_id} not found")


# ---------------------------------------------------------------------------
# Document mapping
# ---------------------------------------------------------------------------

def to_document(record: ObjectRecord) -> dict[str, Any]:
    """Map a record to its stored document. imageUrl is omitted when absent."""
    document: dict[str, Any] = {
        "id": record.id,
        "title": record.title,
        "description": record.description,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }
    if record.image_url is not None:
        document["imageUrl"] = record.image_url
    return document


def from_document(document: dict[str, Any]) -> ObjectRecord:
    """Map a stored document back to a record. The internal _id is dropped."""
    return ObjectRecord(
        id=document["id"],
        title=document["title"],
        description=document["description"],
        image_url=document.get("imageUrl"),
        created_at=_as_utc(document.get("createdAt")),
        updated_at=_as_utc(document.get("updatedAt")),
    )


# ---------------------------------------------------------------------------
# MongoDB implementation
# ---------------------------------------------------------------------------

class MongoObjectRepository:
    """
    Repository for object persistence in a MongoDB collection.

    Each method corresponds to a use case the application needs:
    - insert: Persist a new record
    - list_all: All records, newest first
    - find_by_id: Load one record by its external id
    - delete_by_id: Remove one record

    Driver errors propagate unchanged; the service decides how to
    surface them.
    """

    def __init__(
        self,
        collection,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._collection = collection
        self._clock = clock

    async def ensure_indexes(self) -> None:
        """Create the listing index and the unique id index."""
        await self._collection.create_index([("createdAt", DESCENDING)])
        await self._collection.create_index("id", unique=True)
        logger.info("Ensured object collection indexes")

    async def insert(self, record: ObjectRecord) -> ObjectRecord:
        now = self._clock()
        record.created_at = now
        record.updated_at = now

        document = to_document(record)
        await self._collection.insert_one(document)

        logger.debug("Inserted object document", extra={"object_id": record.id})

        return from_document(document)

    async def list_all(self) -> list[ObjectRecord]:
        cursor = self._collection.find().sort("createdAt", DESCENDING)
        documents = await cursor.to_list(length=None)
        return [from_document(document) for document in documents]

    async def find_by_id(self, object_id: str) -> ObjectRecord:
        document = await self._collection.find_one({"id": object_id})
        if not document:
            raise _not_found(object_id)
        return from_document(document)

    async def delete_by_id(self, object_id: str) -> None:
        result = await self._collection.delete_one({"id": object_id})
        if result.deleted_count == 0:
            raise _not_found(object_id)


# ---------------------------------------------------------------------------
# In-memory implementation for local development
# ---------------------------------------------------------------------------

class InMemoryObjectRepository:
    """
    Dict-backed repository with the same contract as MongoObjectRepository.

    Records are stored as documents so the mapping functions are
    exercised exactly as they are against MongoDB.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._clock = clock
        logger.info("Initialized in-memory object repository")

    async def ensure_indexes(self) -> None:
        pass

    async def insert(self, record: ObjectRecord) -> ObjectRecord:
        if record.id in self._documents:
            raise ValueError(f"Duplicate object id: {record.id}")

        now = self._clock()
        record.created_at = now
        record.updated_at = now

        document = to_document(record)
        self._documents[record.id] = document
        return from_document(document)

    async def list_all(self) -> list[ObjectRecord]:
        # reversed() keeps later inserts first when timestamps tie
        documents = sorted(
            reversed(list(self._documents.values())),
            key=lambda document: document["createdAt"],
            reverse=True,
        )
        return [from_document(document) for document in documents]

    async def find_by_id(self, object_id: str) -> ObjectRecord:
        document = self._documents.get(object_id)
        if document is None:
            raise _not_found(object_id)
        return from_document(document)

    async def delete_by_id(self, object_id: str) -> None:
        if self._documents.pop(object_id, None) is None:
            raise _not_found(object_id)
