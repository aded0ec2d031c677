# catalog-it Change Detection
# Decide from remote metadata whether an item must be re-fetched

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Optional

from catalog_it.catalog.model import Item
from catalog_it.utils.timestamps import parse_http_date, to_iso, utc_now

logger = logging.getLogger(__name__)

LAST_MODIFIED = "last-modified"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that also works on plain dicts."""
    value = headers.get(name)
    if value is not None:
        return value
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def apply_headers(item: Item, headers: Mapping[str, str], now: Optional[datetime] = None) -> Item:
    """
    Update an item from a header check.

    ``needs_update`` becomes True when no modification time was recorded
    before, when the item was never saved, or when the modification time
    changed. An unparseable or missing ``Last-Modified`` counts as changed.
    A flag that is already True is never cleared here, only by
    :func:`mark_saved`, so a failed or interrupted transfer is retried.

    Args:
        item: Item to update in place.
        headers: Response headers of the metadata probe.
        now: Time of the check (defaults to the current UTC time).

    Returns:
        The same item, updated. The caller persists the catalog.
    """
    parsed = parse_http_date(_header(headers, LAST_MODIFIED))
    observed = to_iso(parsed) if parsed is not None else None

    if observed is None:
        logger.debug("No usable Last-Modified for %s, marking for update", item.id)
        item.needs_update = True
    else:
        # A pending update stays pending until mark_saved clears it
        item.needs_update = (
            bool(item.needs_update)
            or item.last_modified_remote is None
            or item.last_saved is None
            or item.last_modified_remote != observed
        )

    item.last_modified_remote = observed
    item.last_header_check = to_iso(now or utc_now())
    return item


def mark_saved(item: Item, now: Optional[datetime] = None) -> Item:
    """Record a successful transfer of the item's content."""
    item.last_saved = to_iso(now or utc_now())
    item.needs_update = False
    return item
