"""
Push channel endpoint.

Clients open a WebSocket and receive objectCreated / objectDeleted
events as they happen. No handshake payload is needed and nothing the
client sends is acted on; inbound frames, text or binary, are read
only to notice the disconnect.
"""

import logging

from fastapi import APIRouter, WebSocket

from ..dependencies import NotifierDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def object_events(websocket: WebSocket, notifier: NotifierDep) -> None:
    await websocket.accept()
    connection_id = notifier.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        notifier.disconnect(connection_id)
