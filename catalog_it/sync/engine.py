# catalog-it Sync Engine
# Coordinates discovery, header scans and data scans for one catalog

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from catalog_it.catalog.detector import apply_headers, mark_saved
from catalog_it.catalog.merge import merge_catalogs
from catalog_it.catalog.model import Catalog, Item
from catalog_it.catalog.store import CatalogStore
from catalog_it.config.schema import CatalogItConfig
from catalog_it.errors import CatalogNotFoundError
from catalog_it.sources.base import CatalogSource
from catalog_it.storage import create_storage
from catalog_it.storage.base import StorageBackend
from catalog_it.sync.scanner import ScanOutcome, ScanResult, scan
from catalog_it.sync.transfer import ProgressCallback, TransferOptions, TransferPipeline, TransferReceipt
from catalog_it.utils.timestamps import run_stamp, utc_now

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[ScanOutcome[Any]], Any]


@dataclass
class SyncReport:
    """Result of a complete update + headers + data run."""

    catalog: Catalog
    headers: ScanResult[Item]
    data: ScanResult[TransferReceipt]

    @property
    def success(self) -> bool:
        """Check if both scans completed without failures."""
        return self.headers.success and self.data.success


@dataclass
class CatalogStatus:
    """Counts describing the persisted catalog."""

    source_id: str
    modified_at: Optional[str]
    total: int = 0
    pending: int = 0
    unchecked: int = 0
    archived: int = 0


class CatalogSync:
    """
    Main synchronization engine.

    Keeps the persisted catalog of one remote source up to date and archives
    changed items into storage. Item-completion callbacks mutate and persist
    the catalog inside the store's transaction, one at a time.
    """

    def __init__(
        self,
        config: CatalogItConfig,
        source: CatalogSource,
        storage: Optional[StorageBackend] = None,
        store: Optional[CatalogStore] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize sync engine.

        Args:
            config: catalog-it configuration.
            source: Remote catalog.
            storage: Archive destination. Only needed for data scans.
            store: Catalog persistence (creates one in the configured cache if not provided).
            clock: Returns the current time; replaceable in tests.
        """
        self.config = config
        self.catalog_id = config.require_catalog_id()
        self.source = source
        self.storage = storage
        self.store = store or CatalogStore(self.catalog_id, config.cache_path)
        self.clock = clock
        self._storage_ready = False

    @classmethod
    def from_config(cls, config: CatalogItConfig, *, with_storage: bool = True) -> CatalogSync:
        """Build an engine with the Socrata source and the configured storage."""
        from catalog_it.sources.socrata import SocrataSource

        source = SocrataSource(config.require_catalog_id(), fmt=config.format, timeout=config.timeout_seconds)
        storage = create_storage(config) if with_storage else None
        return cls(config, source, storage)

    @property
    def catalog(self) -> Catalog:
        """
        Get the persisted catalog.

        Raises:
            CatalogNotFoundError: If no catalog was discovered yet.
        """
        catalog = self.store.catalog
        if catalog is None:
            raise CatalogNotFoundError(self.catalog_id)
        return catalog

    def update_catalog(self) -> Catalog:
        """
        Discover the remote catalog and merge it into the persisted one.

        Raises:
            DiscoveryError: If discovery fails; nothing is merged.
            PersistenceError: If the merged catalog cannot be saved.
        """
        discovered = self.source.discover_catalog()
        with self.store.transaction() as previous:
            merged = merge_catalogs(previous, discovered, now=self.clock())
            self.store.save(merged)

        logger.info("Catalog %s: %d items", self.catalog_id, len(merged))
        return merged

    def fetch_headers(self, item_id: str) -> Item:
        """Probe one item and record whether it needs an update."""
        headers = self.source.fetch_headers(item_id)
        with self.store.transaction():
            item = apply_headers(self.catalog.get_item(item_id), headers, now=self.clock())
            self.store.save()
        return item

    def scan_headers(self, on_outcome: Optional[OutcomeCallback] = None) -> ScanResult[Item]:
        """Probe every item in the catalog."""
        items = list(self.catalog.items.values())
        logger.info("Checking headers of %d items", len(items))
        return scan(
            items,
            lambda item: self.fetch_headers(item.id),
            self.config.concurrency_limit,
            on_outcome=on_outcome,
        )

    def relative_path(self, item: Item, stamp: str) -> str:
        """Archive path of one run of an item, relative to the catalog."""
        return f"{item.archive_dir}/{stamp}__{item.id}.{self.config.format}"

    def _prepare_storage(self) -> StorageBackend:
        if self.storage is None:
            self.storage = create_storage(self.config)
        if self.config.create_bucket_on_start and not self._storage_ready:
            self.storage.prepare()
            self._storage_ready = True
        return self.storage

    def fetch_data(
        self,
        item_id: str,
        stamp: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> TransferReceipt:
        """
        Archive one item's content and record the save.

        Raises:
            TransferError: If reading the source or writing storage fails.
        """
        storage = self._prepare_storage()
        item = self.catalog.get_item(item_id)
        pipeline = TransferPipeline(storage, catalog_id=self.catalog_id, prefix=self.config.key_prefix)
        options = TransferOptions(
            compress=self.config.compress,
            concurrency_hint=self.config.chunk_concurrency,
            progress=progress,
        )

        source = self.source.open_content_stream(item_id)
        receipt = pipeline.transfer(self.relative_path(item, stamp or run_stamp(self.clock())), source, options)

        with self.store.transaction():
            mark_saved(item, now=self.clock())
            self.store.save()
        return receipt

    def pending_items(self, force: bool = False) -> list[Item]:
        """Items a data scan would transfer."""
        if force:
            return list(self.catalog.items.values())
        return self.catalog.pending_items()

    def status(self) -> CatalogStatus:
        """Summarize which items are pending, never checked or archived."""
        catalog = self.catalog
        items = list(catalog.items.values())
        return CatalogStatus(
            source_id=catalog.source_id,
            modified_at=catalog.modified_at,
            total=len(items),
            pending=sum(1 for item in items if item.needs_update),
            unchecked=sum(1 for item in items if item.needs_update is None),
            archived=sum(1 for item in items if item.last_saved is not None),
        )

    def scan_data(
        self,
        force: bool = False,
        on_outcome: Optional[OutcomeCallback] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ScanResult[TransferReceipt]:
        """
        Archive every item that needs an update.

        All transfers of one scan share a run stamp, so each run lands in its
        own file per item.

        Args:
            force: Transfer every item regardless of ``needs_update``.
            on_outcome: Called as each item finishes.
            progress: Byte progress listener passed to every transfer.
        """
        items = self.pending_items(force=force)
        stamp = run_stamp(self.clock())
        logger.info("Transferring %d items (run %s)", len(items), stamp)
        if items:
            self._prepare_storage()
        return scan(
            items,
            lambda item: self.fetch_data(item.id, stamp, progress),
            self.config.concurrency_limit,
            on_outcome=on_outcome,
        )

    def run(self, on_outcome: Optional[OutcomeCallback] = None) -> SyncReport:
        """Update the catalog, then run the header scan and the data scan."""
        catalog = self.update_catalog()
        headers = self.scan_headers(on_outcome=on_outcome)
        data = self.scan_data(on_outcome=on_outcome)
        return SyncReport(catalog=catalog, headers=headers, data=data)

    def reset(self) -> bool:
        """Remove the persisted catalog."""
        return self.store.remove()
