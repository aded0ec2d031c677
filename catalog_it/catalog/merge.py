# catalog-it Catalog Merge
# Combine a fresh discovery with previously persisted history

from dataclasses import fields, replace
from datetime import datetime
from typing import Optional

from catalog_it.catalog.model import Catalog, Item
from catalog_it.utils.timestamps import to_iso, utc_now


def merge_items(previous: Item, discovered: Item) -> Item:
    """
    Merge two records of the same item.

    Previous values win; fields the previous record never had are filled
    from the discovered record.
    """
    filled = {}
    for f in fields(Item):
        if getattr(previous, f.name) is None:
            value = getattr(discovered, f.name)
            if value is not None:
                filled[f.name] = value
    # An empty display name counts as missing too
    if not previous.display_name and discovered.display_name:
        filled["display_name"] = discovered.display_name
    return replace(previous, **filled)


def merge_catalogs(
    previous: Optional[Catalog],
    discovered: Catalog,
    now: Optional[datetime] = None,
) -> Catalog:
    """
    Merge a freshly discovered catalog into the persisted one.

    Items that disappeared from the remote listing are kept, so local history
    (``last_saved`` and friends) is never purged by discovery.

    Args:
        previous: Persisted catalog, or None on the first run.
        discovered: Catalog just returned by the remote source.
        now: Merge time (defaults to the current UTC time).

    Returns:
        The merged catalog. When ``previous`` is None this is ``discovered``
        itself, unchanged.
    """
    if previous is None:
        return discovered

    items: dict[str, Item] = {}
    for item_id in previous.items.keys() | discovered.items.keys():
        old = previous.items.get(item_id)
        new = discovered.items.get(item_id)
        if old is not None and new is not None:
            items[item_id] = merge_items(old, new)
        else:
            items[item_id] = replace(old or new)

    return Catalog(
        source_id=previous.source_id or discovered.source_id,
        source_url=previous.source_url or discovered.source_url,
        modified_at=to_iso(now or utc_now()),
        items=items,
    )
