"""
Unit tests for the object repositories.

MongoObjectRepository is driven through a small in-process stand-in
for a motor collection that implements just the calls the repository
makes. InMemoryObjectRepository is tested directly.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from src.core.objects.errors import NotFoundError
from src.core.objects.models import ObjectRecord
from src.infrastructure.mongo.repositories.objects import (
    InMemoryObjectRepository,
    MongoObjectRepository,
    from_document,
    to_document,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class ScriptedClock:
    """Returns the given timestamps in order, one per call."""

    def __init__(self, offsets_in_minutes: list[int]) -> None:
        self._times = [BASE_TIME + timedelta(minutes=m) for m in offsets_in_minutes]

    def __call__(self) -> datetime:
        return self._times.pop(0)


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key, direction):
        self._documents = sorted(
            self._documents, key=lambda d: d[key], reverse=direction < 0
        )
        return self

    async def to_list(self, length=None):
        return [dict(d) for d in self._documents]


class FakeCollection:
    """Just enough of AsyncIOMotorCollection for the repository."""

    def __init__(self) -> None:
        self.documents: list[dict] = []
        self.indexes: list[tuple] = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))

    async def insert_one(self, document):
        document["_id"] = f"oid-{len(self.documents)}"
        self.documents.append(dict(document))

    def find(self):
        return FakeCursor(list(self.documents))

    async def find_one(self, query):
        for document in self.documents:
            if all(document.get(k) == v for k, v in query.items()):
                return dict(document)
        return None

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if all(document.get(k) == v for k, v in query.items()):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


# ---------------------------------------------------------------------------
# Document mapping
# ---------------------------------------------------------------------------

class TestDocumentMapping:

    def test_missing_image_is_not_stored(self):
        record = ObjectRecord(title="Chair", description="Oak chair")

        assert "imageUrl" not in to_document(record)

    def test_internal_id_is_dropped_on_read(self):
        document = {
            "_id": "507f1f77bcf86cd799439011",
            "id": "abc",
            "title": "Chair",
            "description": "Oak chair",
            "imageUrl": "https://cdn.example.com/objects/1-a.jpg",
            "createdAt": BASE_TIME,
            "updatedAt": BASE_TIME,
        }

        record = from_document(document)

        assert record.id == "abc"
        assert record.image_url == "https://cdn.example.com/objects/1-a.jpg"

    def test_naive_timestamps_are_read_as_utc(self):
        document = {
            "id": "abc",
            "title": "Chair",
            "description": "Oak chair",
            "createdAt": datetime(2024, 1, 1, 9, 30),
            "updatedAt": datetime(2024, 1, 1, 9, 30),
        }

        record = from_document(document)

        assert record.created_at.tzinfo == timezone.utc


# ---------------------------------------------------------------------------
# MongoDB repository
# ---------------------------------------------------------------------------

class TestMongoObjectRepository:

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_listing_and_unique_id_indexes(self):
        collection = FakeCollection()
        repository = MongoObjectRepository(collection)

        await repository.ensure_indexes()

        assert collection.indexes == [
            ([("createdAt", -1)], {}),
            ("id", {"unique": True}),
        ]

    @pytest.mark.asyncio
    async def test_insert_assigns_timestamps(self):
        repository = MongoObjectRepository(FakeCollection(), clock=ScriptedClock([5]))

        stored = await repository.insert(ObjectRecord(title="Chair", description="Oak chair"))

        assert stored.created_at == BASE_TIME + timedelta(minutes=5)
        assert stored.updated_at == stored.created_at

    @pytest.mark.asyncio
    async def test_list_all_is_newest_first(self):
        repository = MongoObjectRepository(FakeCollection(), clock=ScriptedClock([2, 9, 4]))
        for title in ("a", "b", "c"):
            await repository.insert(ObjectRecord(title=title, description="x"))

        titles = [record.title for record in await repository.list_all()]

        assert titles == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_find_and_delete_by_id(self):
        repository = MongoObjectRepository(FakeCollection())
        stored = await repository.insert(ObjectRecord(title="Chair", description="Oak chair"))

        assert (await repository.find_by_id(stored.id)).title == "Chair"

        await repository.delete_by_id(stored.id)

        with pytest.raises(NotFoundError):
            await repository.find_by_id(stored.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id_raises_not_found(self):
        repository = MongoObjectRepository(FakeCollection())

        with pytest.raises(NotFoundError, match="Object with ID nope not found"):
            await repository.delete_by_id("nope")


# ---------------------------------------------------------------------------
# In-memory repository
# ---------------------------------------------------------------------------

class TestInMemoryObjectRepository:

    @pytest.mark.asyncio
    async def test_list_all_orders_by_creation_time_not_insertion(self):
        repository = InMemoryObjectRepository(clock=ScriptedClock([30, 10, 20]))
        for title in ("a", "b", "c"):
            await repository.insert(ObjectRecord(title=title, description="x"))

        titles = [record.title for record in await repository.list_all()]

        assert titles == ["a", "c", "b"]

    @pytest.mark.asyncio
    async def test_tied_timestamps_list_later_insert_first(self):
        repository = InMemoryObjectRepository(clock=ScriptedClock([1, 1]))
        await repository.insert(ObjectRecord(title="first", description="x"))
        await repository.insert(ObjectRecord(title="second", description="x"))

        titles = [record.title for record in await repository.list_all()]

        assert titles == ["second", "first"]

    @pytest.mark.asyncio
    async def test_duplicate_id_is_rejected(self):
        repository = InMemoryObjectRepository()
        await repository.insert(ObjectRecord(title="a", description="x", id="same"))

        with pytest.raises(ValueError, match="Duplicate"):
            await repository.insert(ObjectRecord(title="b", description="x", id="same"))

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self):
        repository = InMemoryObjectRepository()

        with pytest.raises(NotFoundError):
            await repository.find_by_id("missing")
        with pytest.raises(NotFoundError):
            await repository.delete_by_id("missing")
