# catalog-it Catalog Module
# Catalog model, merge, change detection and persistence

from catalog_it.catalog.detector import apply_headers, mark_saved
from catalog_it.catalog.merge import merge_catalogs, merge_items
from catalog_it.catalog.model import Catalog, Item, slugify
from catalog_it.catalog.store import CatalogStore, get_cache_dir

__all__ = [
    # Model
    "Catalog",
    "Item",
    "slugify",
    # Merge
    "merge_catalogs",
    "merge_items",
    # Change detection
    "apply_headers",
    "mark_saved",
    # Persistence
    "CatalogStore",
    "get_cache_dir",
]
