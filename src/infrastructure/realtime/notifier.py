"""
WebSocket fan-out for object events.

The notifier keeps a registry of connected clients and pushes two
events to all of them:
- objectCreated {id, title, description, imageUrl, createdAt}
- objectDeleted {id, deletedAt}

Delivery is fire-and-forget. There is no acknowledgment and no replay
for clients that connect later. A client whose send fails or times out
is dropped from the registry; the broadcast carries on to the others.

Each message is a JSON text frame: {"event": <name>, "data": <payload>}.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol
from uuid import uuid4

from src.core.objects.models import ObjectRecord

logger = logging.getLogger(__name__)

OBJECT_CREATED = "objectCreated"
OBJECT_DELETED = "objectDeleted"

# Seconds a single client may take to accept one message
DEFAULT_SEND_TIMEOUT = 2.0


class PushConnection(Protocol):
    """The part of a WebSocket the notifier needs."""

    async def send_json(self, data: Any, mode: str = "text") -> None:
        ...


def object_created_payload(record: ObjectRecord) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": record.id,
        "title": record.title,
        "description": record.description,
    }
    if record.image_url is not None:
        payload["imageUrl"] = record.image_url
    payload["createdAt"] = record.created_at.isoformat() if record.created_at else None
    return payload


def object_deleted_payload(
    object_id: str,
    deleted_at: Optional[datetime] = None,
) -> dict[str, Any]:
    deleted_at = deleted_at or datetime.now(timezone.utc)
    return {"id": object_id, "deletedAt": deleted_at.isoformat()}


class RealtimeNotifier:
    """
    Registry of connected push clients plus broadcast.

    The registry is only ever added to and removed from. It lives on
    the event loop thread, so no locking is needed.
    """

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        self._connections: dict[str, PushConnection] = {}
        self._send_timeout = send_timeout

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def connect(self, connection: PushConnection) -> str:
        """Register an accepted connection and return its id."""
        connection_id = uuid4().hex
        self._connections[connection_id] = connection
        logger.info(
            "Client connected",
            extra={"connection_id": connection_id, "clients": len(self._connections)}
        )
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        if self._connections.pop(connection_id, None) is not None:
            logger.info(
                "Client disconnected",
                extra={"connection_id": connection_id, "clients": len(self._connections)}
            )

    async def broadcast(self, event: str, data: dict[str, Any]) -> int:
        """
        Send an event to every connected client concurrently.

        Each send is bounded by send_timeout, so a client that stopped
        reading delays the caller by at most that long. Clients whose
        send fails or times out are dropped.

        Returns the number of clients that received it.
        """
        message = {"event": event, "data": data}

        # Snapshot so failing clients can be removed afterwards
        targets = list(self._connections.items())
        if not targets:
            return 0

        results = await asyncio.gather(
            *(
                asyncio.wait_for(connection.send_json(message), self._send_timeout)
                for _, connection in targets
            ),
            return_exceptions=True,
        )

        delivered = 0
        for (connection_id, _), result in zip(targets, results):
            if isinstance(result, BaseException):
                error = "send timed out" if isinstance(result, asyncio.TimeoutError) else str(result)
                logger.warning(
                    "Dropping client after failed send",
                    extra={"connection_id": connection_id, "event": event, "error": error}
                )
                self.disconnect(connection_id)
            else:
                delivered += 1

        logger.debug("Broadcast event", extra={"event": event, "delivered": delivered})

        return delivered

    async def object_created(self, record: ObjectRecord) -> int:
        return await self.broadcast(OBJECT_CREATED, object_created_payload(record))

    async def object_deleted(self, object_id: str) -> int:
        return await self.broadcast(OBJECT_DELETED, object_deleted_payload(object_id))
