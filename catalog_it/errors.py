# catalog-it Errors
# Exception hierarchy shared by all components

from pathlib import Path
from typing import Optional


class CatalogItError(Exception):
    """Base class for catalog-it errors."""


class ConfigurationError(CatalogItError):
    """A required setting is missing or invalid."""


class CatalogNotFoundError(ConfigurationError):
    """No persisted catalog exists yet for the configured source."""

    def __init__(self, catalog_id: str):
        super().__init__(f"No catalog cached for '{catalog_id}'. Run 'catalog-it update' first.")
        self.catalog_id = catalog_id


class DiscoveryError(CatalogItError):
    """The remote catalog listing could not be fetched or parsed."""


class HeaderCheckError(CatalogItError):
    """The metadata probe for one item failed."""

    def __init__(self, item_id: str, message: str):
        super().__init__(f"Error checking headers for id: {item_id} | {message}")
        self.item_id = item_id


class TransferError(CatalogItError):
    """Moving one item's content into storage failed, on either side."""

    def __init__(self, item_id: str, key: str, cause: Optional[BaseException] = None):
        detail = f" | {cause}" if cause is not None else ""
        super().__init__(f"Error transferring id: {item_id} to {key}{detail}")
        self.item_id = item_id
        self.key = key
        self.cause = cause


class PersistenceError(CatalogItError):
    """The catalog file could not be read or written."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path
