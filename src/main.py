"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Can create multiple app instances if needed (e.g., for testing)

For local development:
    uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.errors import register_exception_handlers
from .api.routes import events, health, objects
from .config.settings import Settings, get_settings
from .core.objects.service import ObjectService
from .infrastructure.mongo.client import create_mongo_client
from .infrastructure.mongo.repositories.objects import (
    InMemoryObjectRepository,
    MongoObjectRepository,
)
from .infrastructure.realtime.notifier import RealtimeNotifier
from .infrastructure.storage.client import StorageConfig, create_storage_client

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the long-lived clients once and puts them on app.state:
    - storage client (fails fast on missing S3 configuration)
    - MongoDB client and repository (indexes ensured on startup)
    - push-channel notifier

    FastAPI calls this automatically when the application starts/stops.
    """
    settings: Settings = app.state.settings

    logger.info(
        "Object Gallery API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {
                "mongodb": settings.mongodb_mock_mode,
                "s3": settings.s3_mock_mode,
            }
        }
    )

    # Raises ConfigurationError naming every missing variable
    storage = create_storage_client(
        config=StorageConfig.from_settings(settings),
        mock_mode=settings.s3_mock_mode,
    )

    mongo_client = None
    if settings.mongodb_mock_mode:
        repository = InMemoryObjectRepository()
    else:
        mongo_client = create_mongo_client(settings.mongodb_uri)
        collection = mongo_client[settings.mongodb_database][settings.mongodb_collection]
        repository = MongoObjectRepository(collection)
        await repository.ensure_indexes()

    app.state.storage = storage
    app.state.repository = repository
    app.state.mongo_client = mongo_client
    app.state.object_service = ObjectService(repository=repository, storage=storage)
    app.state.notifier = RealtimeNotifier()

    yield

    # Shutdown
    if mongo_client is not None:
        mongo_client.close()
    logger.info("Object Gallery API shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Tests pass their own
    Settings (usually with both mock modes on); otherwise the cached
    environment settings are used.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Create, list, fetch, and delete objects with an optional image.

        ## Push channel

        Connect a WebSocket to `/ws` to receive `objectCreated` and
        `objectDeleted` events as JSON messages `{"event": ..., "data": ...}`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Credentials cannot be combined with a wildcard origin
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        objects.router,
        prefix="/objects",
        tags=["Objects"],
    )

    app.include_router(
        events.router,
        tags=["Events"],
    )

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - service info."""
        return {
            "message": "Object Gallery API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
