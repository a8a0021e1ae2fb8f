"""
Object storage client for uploaded images.

Supports any S3-compatible provider (Cloudflare R2, AWS S3, MinIO,
DigitalOcean Spaces, Backblaze B2) with a mock mode for local development.

Images are written under generated keys and addressed by public URL:
{public_url}/{key}. The public URL is what the rest of the application
stores and passes around; the key is derived back from it on delete.

Mock mode stores images in memory, enabling API testing without
provisioning actual object storage.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from ...config.settings import Settings
from ...core.objects.errors import ConfigurationError, StorageError, ValidationError
from ...core.objects.models import UploadedImage, validate_image

logger = logging.getLogger(__name__)

# All object images live under this prefix
KEY_PREFIX = "objects"


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    Values are Optional so a config built from partial settings can be
    checked in one place and report every missing variable at once.
    """
    endpoint_url: Optional[str]
    access_key_id: Optional[str]
    secret_access_key: Optional[str]
    bucket_name: Optional[str]
    public_url: Optional[str]
    region: str = "auto"  # R2 uses 'auto' for region

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageConfig":
        return cls(
            endpoint_url=settings.s3_endpoint,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            bucket_name=settings.s3_bucket_name,
            public_url=settings.s3_public_url,
            region=settings.s3_region or "auto",
        )

    def missing_fields(self) -> list[str]:
        """Environment variable names of unset fields."""
        required = {
            "S3_ENDPOINT": self.endpoint_url,
            "S3_ACCESS_KEY_ID": self.access_key_id,
            "S3_SECRET_ACCESS_KEY": self.secret_access_key,
            "S3_BUCKET_NAME": self.bucket_name,
            "S3_PUBLIC_URL": self.public_url,
        }
        return [name for name, value in required.items() if not value]


def build_object_key(original_name: str) -> str:
    """
    Generate a collision-resistant storage key.

    Format: objects/{epoch_millis}-{16 hex chars}.{extension}
    The extension comes from the original file name; names without
    one produce a key without one.
    """
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(8)
    key = f"{KEY_PREFIX}/{timestamp}-{random_part}"

    if original_name and "." in original_name:
        extension = original_name.rsplit(".", 1)[-1]
        if extension:
            key = f"{key}.{extension}"

    return key


def _check_image(data: bytes, content_type: str, original_name: str) -> None:
    errors = validate_image(UploadedImage(data, content_type, original_name))
    if errors:
        raise ValidationError(errors[0], errors=errors)


class S3StorageClient:
    """
    S3-compatible object storage client.

    Uses boto3 because every supported provider speaks the S3 API.
    boto3 is synchronous, so calls run in a worker thread to keep the
    event loop free while an upload is in flight.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the boto3 client.

        Raises ConfigurationError naming every missing variable before
        any connection is attempted.
        """
        missing = config.missing_fields()
        if missing:
            raise ConfigurationError(
                "Missing required S3 configuration environment variables: "
                f"{', '.join(missing)}. "
                "Set them in the environment or in the .env file."
            )

        import boto3
        from botocore.config import Config

        self._config = config
        self._public_url = config.public_url.rstrip("/")

        # Path-style addressing and v4 signatures are required by R2 and MinIO
        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        )

        self._s3_client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    def public_url_for(self, key: str) -> str:
        return f"{self._public_url}/{key}"

    def key_from_url(self, public_url: str) -> str:
        """Strip the public base URL prefix to recover the storage key."""
        prefix = f"{self._public_url}/"
        if public_url.startswith(prefix):
            return public_url[len(prefix):]
        return public_url

    async def upload(self, data: bytes, content_type: str, original_name: str) -> str:
        """
        Upload an image and return its public URL.

        Raises ValidationError for a disallowed type or an oversized
        payload, StorageError if the provider call fails.
        """
        _check_image(data, content_type, original_name)

        key = build_object_key(original_name)

        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._config.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except Exception as e:
            logger.error(
                "Failed to upload image",
                extra={"key": key, "size_bytes": len(data), "error": str(e)}
            )
            raise StorageError("Failed to upload image to S3") from e

        logger.info(
            "Uploaded image",
            extra={"key": key, "size_bytes": len(data), "content_type": content_type}
        )

        return self.public_url_for(key)

    async def delete(self, public_url: str) -> None:
        """
        Delete an image by its public URL.

        Failures are logged and swallowed: callers have already decided
        their own outcome and a leftover blob must not change it.
        """
        if not public_url:
            return

        key = self.key_from_url(public_url)

        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except Exception as e:
            logger.warning(
                "Failed to delete image, blob may be orphaned",
                extra={"image_url": public_url, "key": key, "error": str(e)}
            )
            return

        logger.info("Deleted image", extra={"key": key})


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    Applies the same validation and key scheme as the real client so
    the API behaves identically. Not suitable for production.
    """

    def __init__(self, public_url: str = "mock://storage") -> None:
        # {key: (content_type, bytes)}
        self._blobs: dict[str, tuple[str, bytes]] = {}
        self._public_url = public_url.rstrip("/")
        logger.info("Initialized mock storage client (in-memory)")

    @property
    def keys(self) -> list[str]:
        return list(self._blobs)

    def public_url_for(self, key: str) -> str:
        return f"{self._public_url}/{key}"

    def key_from_url(self, public_url: str) -> str:
        prefix = f"{self._public_url}/"
        if public_url.startswith(prefix):
            return public_url[len(prefix):]
        return public_url

    def exists(self, public_url: str) -> bool:
        return self.key_from_url(public_url) in self._blobs

    async def upload(self, data: bytes, content_type: str, original_name: str) -> str:
        """Store image in memory."""
        _check_image(data, content_type, original_name)

        key = build_object_key(original_name)
        self._blobs[key] = (content_type, data)

        logger.debug(
            "Stored image in mock storage",
            extra={"key": key, "size_bytes": len(data)}
        )

        return self.public_url_for(key)

    async def delete(self, public_url: str) -> None:
        """Remove image from memory. Unknown URLs are ignored."""
        if not public_url:
            return
        self._blobs.pop(self.key_from_url(public_url), None)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
):
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        S3StorageClient or MockStorageClient
    """
    if mock_mode:
        # Mock URLs follow the configured public URL when there is one
        if config is not None and config.public_url:
            return MockStorageClient(public_url=config.public_url)
        return MockStorageClient()

    if config is None:
        raise ConfigurationError("Storage configuration is required when not in mock mode")

    return S3StorageClient(config)
