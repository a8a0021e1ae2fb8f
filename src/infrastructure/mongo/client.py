"""
MongoDB connection management.

Provides the motor client factory and a ping used by the readiness
check. Most code never touches this module directly - it goes through
the object repository, which handles the translation between domain
models and documents.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)


def create_mongo_client(uri: str) -> AsyncIOMotorClient:
    """
    Create a motor client.

    tz_aware makes stored timestamps come back as UTC-aware datetimes,
    matching what the repository writes. The client connects lazily, so
    this does not block startup on an unreachable server.
    """
    client = AsyncIOMotorClient(uri, tz_aware=True)
    logger.info("Created MongoDB client")
    return client


async def ping(client: AsyncIOMotorClient) -> None:
    """Round-trip to the server. Raises if it is unreachable."""
    await client.admin.command("ping")
