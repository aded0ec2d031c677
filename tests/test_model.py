# Tests for catalog_it.catalog.model
# Catalog and item records

import pytest

from catalog_it.catalog.model import Catalog, Item, slugify


class TestSlugify:
    """Tests for slugify function."""

    def test_punctuation_and_spaces(self):
        assert slugify("Crime Data 2020!!") == "crime-data-2020"

    def test_collapses_runs(self):
        assert slugify("  Budget -- FY 2024 / Q1  ") == "budget-fy-2024-q1"

    def test_idempotent(self):
        for title in ["Crime Data 2020!!", "Äpfel & Birnen", "a__b", "---"]:
            once = slugify(title)
            assert slugify(once) == once

    def test_only_punctuation(self):
        assert slugify("!!!") == ""


class TestItem:
    """Tests for Item dataclass."""

    def test_slug_from_display_name(self):
        item = Item(id="abc-123", display_name="Crime Data 2020!!")
        assert item.slug == "crime-data-2020"
        assert item.archive_dir == "abc-123-crime-data-2020"

    def test_explicit_slug_kept(self):
        item = Item(id="abc-123", display_name="Crime", slug="custom")
        assert item.slug == "custom"

    def test_archive_dir_without_name(self):
        item = Item(id="abc-123")
        assert item.slug is None
        assert item.archive_dir == "abc-123"

    def test_to_dict_drops_unset(self):
        data = Item(id="abc-123", display_name="Budget").to_dict()
        assert data == {"id": "abc-123", "display_name": "Budget", "slug": "budget"}

    def test_from_dict_ignores_unknown_keys(self):
        item = Item.from_dict({"id": "abc-123", "display_name": "Budget", "legacy": 1, "needs_update": True})
        assert item.id == "abc-123"
        assert item.needs_update is True


class TestCatalog:
    """Tests for Catalog dataclass."""

    def test_items_keyed_by_id(self):
        catalog = Catalog(source_id="x", items={"wrong": Item(id="abc-123")})
        assert list(catalog.items) == ["abc-123"]

    def test_add_and_get(self):
        catalog = Catalog(source_id="x")
        catalog.add_item(Item(id="abc-123", display_name="Budget"))
        assert "abc-123" in catalog
        assert len(catalog) == 1
        assert catalog.get_item("abc-123").display_name == "Budget"

    def test_get_missing(self):
        catalog = Catalog(source_id="x")
        with pytest.raises(KeyError, match="abc-123"):
            catalog.get_item("abc-123")

    def test_pending_items(self, sample_catalog):
        sample_catalog.items["def-456"].needs_update = True
        assert [i.id for i in sample_catalog.pending_items()] == ["def-456"]

    def test_never_checked_not_pending(self, sample_catalog):
        assert sample_catalog.pending_items() == []

    def test_dict_roundtrip(self, sample_catalog):
        restored = Catalog.from_dict(sample_catalog.to_dict())
        assert restored == sample_catalog

    def test_from_dict_uses_key_as_id(self):
        catalog = Catalog.from_dict({"source_id": "x", "items": {"abc-123": {"display_name": "Budget"}}})
        assert catalog.get_item("abc-123").id == "abc-123"

    def test_from_legacy_dict(self):
        catalog = Catalog.from_legacy_dict(
            {
                "modified": 1704067200,
                "catalog": "data.example.gov",
                "items": {"abc-123": {"name": "Budget", "lastModified": None, "update": "yes"}},
            }
        )

        item = catalog.get_item("abc-123")
        assert catalog.source_id == "data.example.gov"
        assert catalog.modified_at == "2024-01-01T00:00:00+00:00"
        assert item.slug == "budget"
        assert item.last_modified_remote is None
        assert item.needs_update is None
