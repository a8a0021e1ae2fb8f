"""
Error taxonomy for the object lifecycle.

Every error carries the HTTP status it maps to, so the API boundary
can render it without a lookup table. Infrastructure code raises these
directly (or wraps provider exceptions in them); nothing here knows
about FastAPI.
"""

from typing import Optional


class ObjectServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(ObjectServiceError):
    """Raised when input shape, size, or type is rejected."""
    status_code = 400


class NotFoundError(ObjectServiceError):
    """Raised when no object has the requested id."""
    status_code = 404


class StorageError(ObjectServiceError):
    """Raised when the blob store provider or transport fails."""
    status_code = 500


class ConfigurationError(ObjectServiceError):
    """Raised when required storage configuration is missing."""
    status_code = 500


class InternalError(ObjectServiceError):
    """Raised for unexpected failures, usually from the database."""
    status_code = 500
