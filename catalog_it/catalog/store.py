# catalog-it Catalog Store
# Persistence of the catalog between runs with a single-writer lock

import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import yaml

from catalog_it.catalog.model import Catalog
from catalog_it.errors import PersistenceError
from catalog_it.utils.paths import atomic_write, ensure_dir, safe_delete

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.yaml"
LEGACY_CATALOG_FILE = "catalog.json"


def get_cache_dir() -> Path:
    """Get the default cache directory."""
    return Path.home() / ".catalog-it"


class CatalogStore:
    """
    Manages catalog persistence for one remote source.

    The catalog lives in ``<cache_dir>/<catalog_id>/catalog.yaml``. Every
    mutation that must survive a crash happens inside :meth:`transaction`,
    which serializes writers so each save sees a consistent catalog.
    """

    def __init__(self, catalog_id: str, cache_dir: Optional[Path] = None):
        """
        Initialize catalog store.

        Args:
            catalog_id: Identifier of the remote catalog.
            cache_dir: Base cache directory. Defaults to ~/.catalog-it
        """
        self.catalog_id = catalog_id
        self.base = Path(cache_dir).expanduser() if cache_dir else get_cache_dir()
        self.directory = self.base / catalog_id
        self.catalog_path = self.directory / CATALOG_FILE
        self._lock = threading.RLock()
        self._catalog: Optional[Catalog] = None
        self._loaded = False

    @property
    def catalog(self) -> Optional[Catalog]:
        """Get current catalog, loading if necessary."""
        if not self._loaded:
            self._catalog = self.load()
            self._loaded = True
        return self._catalog

    @contextmanager
    def transaction(self) -> Iterator[Optional[Catalog]]:
        """Hold the writer lock while mutating and saving the catalog."""
        with self._lock:
            yield self.catalog

    def load(self) -> Optional[Catalog]:
        """
        Load catalog from file.

        Returns:
            The persisted catalog, or None if none was saved yet.

        Raises:
            PersistenceError: If the file exists but cannot be read.
        """
        path = self.catalog_path
        if not path.exists():
            legacy = self.directory / LEGACY_CATALOG_FILE
            if not legacy.exists():
                return None
            return self._load_legacy(legacy)

        logger.debug("Get catalog: %s", path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PersistenceError(path, f"Catalog file is corrupt ({e})") from e
        except OSError as e:
            raise PersistenceError(path, f"Cannot read catalog ({e.strerror})") from e

        if not data:
            return None
        if not isinstance(data, dict):
            raise PersistenceError(path, "Catalog file root is not a mapping")
        return Catalog.from_dict(data)

    def _load_legacy(self, path: Path) -> Optional[Catalog]:
        """Read a catalog.json left by the old tool; the next save writes YAML."""
        logger.info("Migrating legacy catalog: %s", path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(path, f"Catalog file is corrupt ({e})") from e
        except OSError as e:
            raise PersistenceError(path, f"Cannot read catalog ({e.strerror})") from e

        if not data:
            return None
        if not isinstance(data, dict):
            raise PersistenceError(path, "Catalog file root is not a mapping")
        try:
            return Catalog.from_legacy_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise PersistenceError(path, f"Catalog file has an unexpected layout ({e})") from e

    def save(self, catalog: Optional[Catalog] = None) -> None:
        """
        Save catalog to file.

        Args:
            catalog: Catalog to persist; becomes the current catalog.
                     Defaults to the current catalog.

        Raises:
            PersistenceError: If the file cannot be written. The in-memory
                catalog is left as it is.
        """
        with self._lock:
            if catalog is not None:
                self._catalog = catalog
                self._loaded = True
            if self._catalog is None:
                return

            logger.debug("Set catalog: %s", self.catalog_path)
            content = yaml.dump(
                self._catalog.to_dict(),
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
            try:
                ensure_dir(self.directory)
                atomic_write(self.catalog_path, content)
            except OSError as e:
                raise PersistenceError(self.catalog_path, f"Cannot write catalog ({e.strerror})") from e

    def remove(self) -> bool:
        """
        Remove the persisted catalog.

        Returns:
            True if a catalog file was deleted.
        """
        with self._lock:
            logger.debug("Remove catalog: %s", self.catalog_path)
            removed = safe_delete(self.catalog_path, missing_ok=True)
            removed = safe_delete(self.directory / LEGACY_CATALOG_FILE, missing_ok=True) or removed
            self._catalog = None
            self._loaded = True
            return removed
