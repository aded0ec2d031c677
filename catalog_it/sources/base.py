# catalog-it Source Interface
# Capabilities the engine needs from a remote catalog

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalog_it.catalog.model import Catalog
    from catalog_it.sync.transfer import SourceStream


@runtime_checkable
class CatalogSource(Protocol):
    """A remote dataset catalog."""

    def discover_catalog(self) -> "Catalog":
        """List every item; raises DiscoveryError on failure."""
        ...

    def fetch_headers(self, item_id: str) -> Mapping[str, str]:
        """Metadata-only probe of one item's content."""
        ...

    def open_content_stream(self, item_id: str) -> "SourceStream":
        """Open one item's content as a paused stream."""
        ...
