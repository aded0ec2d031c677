# catalog-it Storage Module
# Storage backends and backend selection

from typing import TYPE_CHECKING

from catalog_it.errors import ConfigurationError
from catalog_it.storage.base import StorageBackend
from catalog_it.storage.filesystem import FilesystemStorage
from catalog_it.storage.s3 import S3Storage

if TYPE_CHECKING:
    from catalog_it.config.schema import CatalogItConfig


def create_storage(config: "CatalogItConfig") -> StorageBackend:
    """
    Build the storage backend selected in the configuration.

    Raises:
        ConfigurationError: If the selected backend is missing its target.
    """
    if config.storage_backend == "filesystem":
        if not config.storage_dir:
            raise ConfigurationError("No storage directory provided for the filesystem backend.")
        return FilesystemStorage(config.storage_dir)

    return S3Storage(
        config.require_bucket(),
        acl=config.access_policy,
        profile=config.credential_profile,
        timeout=config.timeout_seconds,
    )


__all__ = [
    "StorageBackend",
    "S3Storage",
    "FilesystemStorage",
    "create_storage",
]
