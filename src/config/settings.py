"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without MongoDB or object storage.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origin), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Object Gallery API"
    api_version: str = "v1"
    environment: str = Field(
        default="production",
        description="Runtime environment. 'development' exposes unexpected error messages in responses."
    )
    port: int = Field(
        default=3000,
        description="Port the HTTP server listens on"
    )

    # MongoDB Configuration
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    mongodb_database: str = Field(
        default="objects",
        description="Database holding the objects collection"
    )
    mongodb_collection: str = Field(
        default="objects",
        description="Collection name for object records"
    )
    mongodb_mock_mode: bool = Field(
        default=False,
        description="Use in-memory repository instead of MongoDB. Enables local dev without a database."
    )

    # S3-compatible Storage Configuration
    s3_endpoint: Optional[str] = Field(
        default=None,
        description="S3 endpoint, e.g. https://<account-id>.r2.cloudflarestorage.com"
    )
    s3_region: str = Field(
        default="auto",
        description="Storage region. R2 uses 'auto'."
    )
    s3_access_key_id: Optional[str] = Field(
        default=None,
        description="Storage access key ID"
    )
    s3_secret_access_key: Optional[str] = Field(
        default=None,
        description="Storage secret access key"
    )
    s3_bucket_name: Optional[str] = Field(
        default=None,
        description="Bucket holding uploaded images"
    )
    s3_public_url: Optional[str] = Field(
        default=None,
        description="Public base URL of the bucket. Image URLs are built as {public_url}/{key}."
    )
    s3_mock_mode: bool = Field(
        default=False,
        description="Use in-memory blob store instead of S3. Enables local dev without object storage."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origin: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origin.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def missing_storage_fields(self) -> list[str]:
        """
        Return the environment variable names of unset storage settings.

        Region is not listed because it has a usable default.
        """
        # Imported here: the storage client module imports Settings
        from ..infrastructure.storage.client import StorageConfig

        return StorageConfig.from_settings(self).missing_fields()

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.mongodb_mock_mode and not self.mongodb_uri:
            missing.append("MONGODB_URI")

        if not self.s3_mock_mode:
            missing.extend(self.missing_storage_fields())

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
