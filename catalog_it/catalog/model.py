# catalog-it Catalog Model
# Catalog and item records tracked between runs

import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional

from catalog_it.utils.timestamps import from_unix

_NON_WORD = re.compile(r"\W+")


def slugify(title: str) -> str:
    """
    Build a storage-safe identifier from a display name.

    Lowercases, collapses every run of non-word characters into a single
    hyphen and strips hyphens from both ends. Applying it to its own output
    returns the same string.

    Args:
        title: Human-readable name.

    Returns:
        Normalized slug, e.g. ``"crime-data-2020"``.
    """
    return _NON_WORD.sub("-", str(title).lower()).strip("-")


@dataclass
class Item:
    """A single dataset tracked by the catalog."""

    id: str
    display_name: str = ""
    slug: Optional[str] = None
    source_link: Optional[str] = None
    last_modified_remote: Optional[str] = None  # ISO format datetime
    last_header_check: Optional[str] = None  # ISO format datetime
    last_saved: Optional[str] = None  # ISO format datetime
    needs_update: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.slug is None and self.display_name:
            self.slug = slugify(self.display_name)

    @property
    def archive_dir(self) -> str:
        """Directory name used for this item's archived runs."""
        if self.slug:
            return f"{self.id}-{self.slug}"
        return self.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping unset fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Create from dictionary."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_legacy_dict(cls, data: dict[str, Any]) -> "Item":
        """Create from an item of a ``catalog.json`` written by the old tool."""
        update = data.get("update")
        return cls(
            id=str(data["id"]),
            display_name=data.get("name") or "",
            slug=data.get("identifier"),
            source_link=data.get("link"),
            last_modified_remote=from_unix(data.get("lastModified")),
            last_header_check=from_unix(data.get("headerCheck")),
            last_saved=from_unix(data.get("lastSaved")),
            needs_update=update if isinstance(update, bool) else None,
        )


@dataclass
class Catalog:
    """
    Complete catalog of a remote source.

    Items are keyed by their remote id; the key always equals ``item.id``.
    """

    source_id: str
    source_url: Optional[str] = None
    modified_at: Optional[str] = None  # ISO format datetime
    items: dict[str, Item] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Re-key so the id invariant holds whatever the caller passed in
        self.items = {item.id: item for item in self.items.values()}

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def add_item(self, item: Item) -> Item:
        """Add or replace an item under its own id."""
        self.items[item.id] = item
        return item

    def get_item(self, item_id: str) -> Item:
        """
        Get an item by id.

        Raises:
            KeyError: If the item is not in the catalog.
        """
        try:
            return self.items[item_id]
        except KeyError:
            raise KeyError(f"Item '{item_id}' not found in catalog '{self.source_id}'") from None

    def pending_items(self) -> list[Item]:
        """Items whose content should be (re-)fetched."""
        return [item for item in self.items.values() if item.needs_update]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"source_id": self.source_id}
        if self.source_url is not None:
            data["source_url"] = self.source_url
        if self.modified_at is not None:
            data["modified_at"] = self.modified_at
        data["items"] = {item_id: item.to_dict() for item_id, item in self.items.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Catalog":
        """Create from dictionary."""
        items = {}
        for key, item_data in (data.get("items") or {}).items():
            item_data = dict(item_data)
            item_data.setdefault("id", key)
            item = Item.from_dict(item_data)
            items[item.id] = item

        return cls(
            source_id=data.get("source_id", ""),
            source_url=data.get("source_url"),
            modified_at=data.get("modified_at"),
            items=items,
        )

    @classmethod
    def from_legacy_dict(cls, data: dict[str, Any]) -> "Catalog":
        """
        Create from a ``catalog.json`` written by the old tool.

        That format uses camelCase keys and unix times in seconds:
        ``{modified, catalog, url, items: {id: {id, link, name, identifier,
        headerCheck, lastModified, update, lastSaved, ...}}}``. Keys with no
        counterpart here (``file``, ``headers``) are dropped.
        """
        items = {}
        for key, item_data in (data.get("items") or {}).items():
            item_data = dict(item_data)
            item_data.setdefault("id", key)
            item = Item.from_legacy_dict(item_data)
            items[item.id] = item

        return cls(
            source_id=data.get("catalog", ""),
            source_url=data.get("url"),
            modified_at=from_unix(data.get("modified")),
            items=items,
        )
