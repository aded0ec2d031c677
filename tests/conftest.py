# catalog-it Test Fixtures
# Pytest fixtures for catalog-it tests

import os
import tempfile
from collections.abc import Generator, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from catalog_it.catalog.model import Catalog, Item
from catalog_it.config.schema import CatalogItConfig
from catalog_it.errors import HeaderCheckError
from catalog_it.sync.transfer import SourceStream

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)

LISTING_HTML = """\
<html><body>
<table class="gridList">
  <tr class="item" data-viewid="abc-123">
    <td class="richSection"><a class="nameLink" href="/Public-Safety/Crimes/abc-123">Crime Data 2020!!</a></td>
  </tr>
  <tr class="item" data-viewid="def-456">
    <td class="richSection"><a class="nameLink" href="https://data.example.gov/d/def-456"> Budget </a></td>
  </tr>
  <tr class="item">
    <td class="richSection"><a class="nameLink" href="/x">No id</a></td>
  </tr>
  <tr class="header"><td>Not an item</td></tr>
</table>
</body></html>
"""


class FakeSource:
    """In-memory catalog source."""

    def __init__(self, catalog_id: str = "data.example.gov"):
        self.catalog_id = catalog_id
        self.items: dict[str, Item] = {}
        self.headers: dict[str, Mapping[str, str]] = {}
        self.contents: dict[str, bytes] = {}
        self.failing_headers: set[str] = set()
        self.failing_content: set[str] = set()
        self.streams: list[SourceStream] = []

    def add(self, item_id: str, name: str, content: bytes = b"a,b\n1,2\n", last_modified: Optional[str] = None):
        self.items[item_id] = Item(id=item_id, display_name=name)
        self.contents[item_id] = content
        self.headers[item_id] = {"Last-Modified": last_modified or "Wed, 21 Oct 2015 07:28:00 GMT"}

    def discover_catalog(self) -> Catalog:
        items = {i: Item(id=i, display_name=item.display_name) for i, item in self.items.items()}
        return Catalog(source_id=self.catalog_id, source_url=f"https://{self.catalog_id}", items=items)

    def fetch_headers(self, item_id: str) -> Mapping[str, str]:
        if item_id in self.failing_headers:
            raise HeaderCheckError(item_id, "connection reset")
        return self.headers[item_id]

    def open_content_stream(self, item_id: str) -> SourceStream:
        if item_id in self.failing_content:

            def broken():
                yield b"partial"
                raise OSError("connection reset")

            stream = SourceStream(item_id, broken)
        else:
            stream = SourceStream.from_bytes(item_id, self.contents[item_id], chunk_size=4)
        self.streams.append(stream)
        return stream


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory without catalog-it environment."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("CATALOG_IT_"):
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed point in time used as the sync clock."""
    return FIXED_NOW


@pytest.fixture
def sample_catalog() -> Catalog:
    """Catalog with one saved and one never-checked item."""
    return Catalog(
        source_id="data.example.gov",
        source_url="https://data.example.gov",
        modified_at="2023-12-01T00:00:00+00:00",
        items={
            "abc-123": Item(
                id="abc-123",
                display_name="Crime Data 2020",
                last_modified_remote="2015-10-21T07:28:00+00:00",
                last_header_check="2023-12-01T00:00:00+00:00",
                last_saved="2023-12-01T00:00:00+00:00",
                needs_update=False,
            ),
            "def-456": Item(id="def-456", display_name="Budget"),
        },
    )


@pytest.fixture
def fake_source() -> FakeSource:
    """Source with two datasets."""
    source = FakeSource()
    source.add("abc-123", "Crime Data 2020")
    source.add("def-456", "Budget", content=b"year,total\n2024,100\n")
    return source


@pytest.fixture
def fs_config(temp_dir: Path) -> CatalogItConfig:
    """Configuration archiving to a local directory."""
    return CatalogItConfig(
        catalog_id="data.example.gov",
        cache_dir=str(temp_dir / "cache"),
        storage_backend="filesystem",
        storage_dir=str(temp_dir / "archive"),
        concurrency_limit=2,
    )
