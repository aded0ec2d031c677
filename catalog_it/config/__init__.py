# catalog-it Configuration Module
# Layered configuration loading, validation, and defaults

from catalog_it.config.defaults import DEFAULT_CONFIG, generate_default_config
from catalog_it.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    read_config_file,
    read_environment,
)
from catalog_it.config.schema import AccessPolicy, CatalogItConfig, StorageBackendType

__all__ = [
    # Schema
    "CatalogItConfig",
    "AccessPolicy",
    "StorageBackendType",
    # Loader
    "load_config",
    "read_config_file",
    "read_environment",
    "get_config_path",
    "ensure_config_exists",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
