# catalog-it Sync Module
# Scanner, transfer pipeline and the engine coordinating them

from catalog_it.sync.scanner import ItemFailure, Scan, ScanOutcome, ScanResult, ScanState, scan
from catalog_it.sync.transfer import (
    SourceStream,
    StreamState,
    TransferOptions,
    TransferPipeline,
    TransferReceipt,
    build_destination_key,
)
from catalog_it.sync.engine import CatalogStatus, CatalogSync, SyncReport

__all__ = [
    # Scanner
    "scan",
    "Scan",
    "ScanState",
    "ScanOutcome",
    "ScanResult",
    "ItemFailure",
    # Transfer
    "SourceStream",
    "StreamState",
    "TransferOptions",
    "TransferPipeline",
    "TransferReceipt",
    "build_destination_key",
    # Engine
    "CatalogSync",
    "SyncReport",
    "CatalogStatus",
]
