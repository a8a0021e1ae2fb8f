"""
Unit tests for the push-channel notifier.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from src.core.objects.models import ObjectRecord
from src.infrastructure.realtime.notifier import (
    OBJECT_CREATED,
    OBJECT_DELETED,
    RealtimeNotifier,
    object_created_payload,
    object_deleted_payload,
)


class FakeConnection:
    def __init__(self) -> None:
        self.messages: list[dict] = []

    async def send_json(self, data, mode="text"):
        self.messages.append(data)


class BrokenConnection:
    async def send_json(self, data, mode="text"):
        raise ConnectionResetError("peer went away")


class StalledConnection:
    """A client that stopped reading: its send never completes."""

    async def send_json(self, data, mode="text"):
        await asyncio.sleep(3600)


def make_record(**overrides) -> ObjectRecord:
    values = dict(
        id="abc",
        title="Chair",
        description="Oak chair",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return ObjectRecord(**values)


class TestPayloads:

    def test_created_payload_shape(self):
        payload = object_created_payload(
            make_record(image_url="https://cdn.example.com/objects/1-a.jpg")
        )

        assert payload == {
            "id": "abc",
            "title": "Chair",
            "description": "Oak chair",
            "imageUrl": "https://cdn.example.com/objects/1-a.jpg",
            "createdAt": "2024-05-01T00:00:00+00:00",
        }

    def test_created_payload_omits_missing_image(self):
        assert "imageUrl" not in object_created_payload(make_record())

    def test_deleted_payload_shape(self):
        deleted_at = datetime(2024, 5, 2, tzinfo=timezone.utc)

        assert object_deleted_payload("abc", deleted_at) == {
            "id": "abc",
            "deletedAt": "2024-05-02T00:00:00+00:00",
        }


class TestRealtimeNotifier:

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_client(self):
        notifier = RealtimeNotifier()
        first, second = FakeConnection(), FakeConnection()
        notifier.connect(first)
        notifier.connect(second)

        delivered = await notifier.object_created(make_record())

        assert delivered == 2
        assert first.messages[0]["event"] == OBJECT_CREATED
        assert first.messages == second.messages

    @pytest.mark.asyncio
    async def test_failed_send_does_not_stop_broadcast(self):
        notifier = RealtimeNotifier()
        notifier.connect(BrokenConnection())
        healthy = FakeConnection()
        notifier.connect(healthy)

        delivered = await notifier.object_deleted("abc")

        assert delivered == 1
        assert healthy.messages[0]["event"] == OBJECT_DELETED
        assert healthy.messages[0]["data"]["id"] == "abc"
        # the broken client is dropped
        assert notifier.connection_count == 1

    @pytest.mark.asyncio
    async def test_disconnected_clients_receive_nothing(self):
        notifier = RealtimeNotifier()
        connection = FakeConnection()
        connection_id = notifier.connect(connection)
        notifier.disconnect(connection_id)

        delivered = await notifier.object_deleted("abc")

        assert delivered == 0
        assert connection.messages == []

    def test_disconnect_of_unknown_id_is_ignored(self):
        notifier = RealtimeNotifier()

        notifier.disconnect("never-connected")

        assert notifier.connection_count == 0

    @pytest.mark.asyncio
    async def test_stalled_client_does_not_hold_the_broadcast(self):
        """A client that never drains is timed out and dropped; others still receive."""
        notifier = RealtimeNotifier(send_timeout=0.05)
        notifier.connect(StalledConnection())
        healthy = FakeConnection()
        notifier.connect(healthy)

        delivered = await asyncio.wait_for(notifier.object_deleted("abc"), timeout=1)

        assert delivered == 1
        assert healthy.messages[0]["data"]["id"] == "abc"
        assert notifier.connection_count == 1
