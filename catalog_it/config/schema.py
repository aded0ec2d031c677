# catalog-it Configuration Schema
# Pydantic model for the layered run configuration

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from catalog_it.errors import ConfigurationError


class StorageBackendType(str, Enum):
    """Where archives are written."""

    S3 = "s3"
    FILESYSTEM = "filesystem"


class AccessPolicy(str, Enum):
    """Canned S3 ACL applied to the bucket and objects."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"


class CatalogItConfig(BaseModel):
    """Root configuration model for catalog-it."""

    model_config = {"use_enum_values": True, "extra": "forbid", "validate_default": True}

    catalog_id: Optional[str] = Field(default=None, description="Domain of the remote catalog, e.g. data.example.gov")
    storage_bucket: Optional[str] = Field(default=None, description="S3 bucket receiving the archives")
    access_policy: AccessPolicy = Field(default=AccessPolicy.PRIVATE, description="Canned ACL for bucket and objects")
    concurrency_limit: int = Field(default=5, ge=1, description="Items processed at once during a scan")
    format: str = Field(default="csv", description="Export format requested from the remote source")
    key_prefix: str = Field(default="", description="Prefix prepended to every storage key")
    timeout_ms: int = Field(default=300_000, gt=0, description="Timeout of each network operation in milliseconds")
    credential_profile: Optional[str] = Field(default=None, description="Named AWS credentials profile")
    create_bucket_on_start: bool = Field(default=False, description="Create the bucket before transferring")
    compress: bool = Field(default=True, description="Gzip archives in flight")
    cache_dir: str = Field(default="~/.catalog-it", description="Directory holding the persisted catalogs")
    storage_backend: StorageBackendType = Field(default=StorageBackendType.S3, description="Archive destination")
    storage_dir: Optional[str] = Field(default=None, description="Root directory for the filesystem backend")
    chunk_concurrency: int = Field(default=5, ge=1, description="Parallel part uploads per archive")

    @field_validator("format")
    @classmethod
    def normalize_format(cls, v: str) -> str:
        """Strip a leading dot and lowercase the format."""
        v = v.strip().lstrip(".").lower()
        if not v:
            raise ValueError("format must not be empty")
        return v

    @field_validator("key_prefix")
    @classmethod
    def strip_prefix(cls, v: str) -> str:
        """Drop surrounding slashes from the key prefix."""
        return v.strip().strip("/")

    @property
    def timeout_seconds(self) -> float:
        """Network timeout in seconds."""
        return self.timeout_ms / 1000.0

    @property
    def cache_path(self) -> Path:
        """Expanded cache directory."""
        return Path(self.cache_dir).expanduser()

    def require_catalog_id(self) -> str:
        """
        Get the catalog identifier.

        Raises:
            ConfigurationError: If no catalog is configured.
        """
        if not self.catalog_id:
            raise ConfigurationError("No catalog provided. Use --catalog or set CATALOG_IT_CATALOG_ID.")
        return self.catalog_id

    def require_bucket(self) -> str:
        """
        Get the storage bucket.

        Raises:
            ConfigurationError: If no bucket is configured.
        """
        if not self.storage_bucket:
            raise ConfigurationError("No storage bucket provided. Use --bucket or set CATALOG_IT_STORAGE_BUCKET.")
        return self.storage_bucket
