"""catalog-it - keep a dataset catalog mirrored and its datasets archived.

Discovers the datasets of a remote open data catalog, detects which changed
since the last archive, and streams their contents into blob storage with
bounded concurrency.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "Catalog",
    "Item",
    "CatalogStore",
    "CatalogSync",
    "CatalogItConfig",
    "load_config",
    "scan",
    "ScanResult",
    "TransferPipeline",
    "SourceStream",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("Catalog", "Item", "CatalogStore"):
        from catalog_it import catalog

        return getattr(catalog, name)
    if name in ("CatalogItConfig", "load_config"):
        from catalog_it import config

        return getattr(config, name)
    if name in ("CatalogSync", "scan", "ScanResult", "TransferPipeline", "SourceStream"):
        from catalog_it import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
