"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Resource lifecycle (connections, clients) is managed in one place

The long-lived clients are created once by the application lifespan
and kept on app.state; the functions here only hand them out. They take
an HTTPConnection so they work for both HTTP and WebSocket routes.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from starlette.requests import HTTPConnection

from ..config.settings import Settings
from ..core.objects.service import ObjectService
from ..infrastructure.realtime.notifier import RealtimeNotifier

logger = logging.getLogger(__name__)


def get_app_settings(connection: HTTPConnection) -> Settings:
    """Settings the running application was created with."""
    return connection.app.state.settings


def get_object_service(connection: HTTPConnection) -> ObjectService:
    return connection.app.state.object_service


def get_notifier(connection: HTTPConnection) -> RealtimeNotifier:
    return connection.app.state.notifier


def get_mongo_client(connection: HTTPConnection) -> Optional[object]:
    """The motor client, or None in mock mode."""
    return getattr(connection.app.state, "mongo_client", None)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
ObjectServiceDep = Annotated[ObjectService, Depends(get_object_service)]
NotifierDep = Annotated[RealtimeNotifier, Depends(get_notifier)]
MongoClientDep = Annotated[Optional[object], Depends(get_mongo_client)]
