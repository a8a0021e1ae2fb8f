"""
Object lifecycle logic.

Contains the domain models, validation, error taxonomy, and the
service that coordinates storage and persistence.
"""

from .errors import (
    ConfigurationError,
    InternalError,
    NotFoundError,
    ObjectServiceError,
    StorageError,
    ValidationError,
)
from .models import (
    CreateObjectRequest,
    ObjectRecord,
    UploadedImage,
    validate_create_request,
    validate_image,
)
from .service import BlobStore, ObjectRepository, ObjectService

__all__ = [
    "ConfigurationError",
    "InternalError",
    "NotFoundError",
    "ObjectServiceError",
    "StorageError",
    "ValidationError",
    "CreateObjectRequest",
    "ObjectRecord",
    "UploadedImage",
    "validate_create_request",
    "validate_image",
    "BlobStore",
    "ObjectRepository",
    "ObjectService",
]
