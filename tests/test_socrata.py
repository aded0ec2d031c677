# Tests for catalog_it.sources.socrata
# HTTP interactions mocked with responses

import re

import pytest
import requests
import responses
from conftest import LISTING_HTML

from catalog_it.errors import ConfigurationError, DiscoveryError, HeaderCheckError, TransferError
from catalog_it.sources import CatalogSource, SocrataSource
from catalog_it.sync.transfer import StreamState

BROWSE = re.compile(r"https://data\.example\.gov/browse/embed.*")


@pytest.fixture
def source() -> SocrataSource:
    return SocrataSource("data.example.gov", timeout=5.0)


class TestSocrataSource:
    """Tests for SocrataSource class."""

    def test_requires_catalog(self):
        with pytest.raises(ConfigurationError):
            SocrataSource("")

    def test_is_catalog_source(self, source):
        assert isinstance(source, CatalogSource)

    def test_urls(self, source):
        assert source.base_url == "https://data.example.gov"
        assert source.catalog_url.startswith("https://data.example.gov/browse/embed?limitTo=datasets")
        assert source.resource_url("abc-123") == "https://data.example.gov/resource/abc-123.csv"
        assert source.resource_url("abc-123", "json") == "https://data.example.gov/resource/abc-123.json"


class TestDiscoverCatalog:
    """Tests for catalog discovery."""

    @responses.activate
    def test_parses_listing(self, source):
        responses.add(responses.GET, BROWSE, body=LISTING_HTML, status=200)

        catalog = source.discover_catalog()

        assert catalog.source_id == "data.example.gov"
        assert catalog.source_url == source.catalog_url
        assert catalog.modified_at is not None
        assert set(catalog.items) == {"abc-123", "def-456"}

        crime = catalog.get_item("abc-123")
        assert crime.display_name == "Crime Data 2020!!"
        assert crime.slug == "crime-data-2020"
        assert crime.source_link == "https://data.example.gov/Public-Safety/Crimes/abc-123"
        assert crime.needs_update is None
        assert crime.last_saved is None

        budget = catalog.get_item("def-456")
        assert budget.display_name == "Budget"
        assert budget.source_link == "https://data.example.gov/d/def-456"

    @responses.activate
    def test_empty_listing(self, source):
        responses.add(responses.GET, BROWSE, body="<html><body></body></html>", status=200)
        assert len(source.discover_catalog()) == 0

    @responses.activate
    def test_error_status(self, source):
        responses.add(responses.GET, BROWSE, status=503)
        with pytest.raises(DiscoveryError, match="503"):
            source.discover_catalog()

    @responses.activate
    def test_connection_error(self, source):
        responses.add(responses.GET, BROWSE, body=requests.ConnectionError("refused"))
        with pytest.raises(DiscoveryError, match="refused"):
            source.discover_catalog()


class TestFetchHeaders:
    """Tests for header probes."""

    @responses.activate
    def test_returns_headers(self, source):
        responses.add(
            responses.GET,
            "https://data.example.gov/resource/abc-123.json",
            json=[{"a": 1}],
            headers={"Last-Modified": "Wed, 21 Oct 2015 07:28:00 GMT"},
        )

        headers = source.fetch_headers("abc-123")

        assert headers["Last-Modified"] == "Wed, 21 Oct 2015 07:28:00 GMT"
        assert "%24limit=1" in responses.calls[0].request.url

    @responses.activate
    def test_error_status(self, source):
        responses.add(responses.GET, "https://data.example.gov/resource/abc-123.json", status=404)
        with pytest.raises(HeaderCheckError, match="abc-123"):
            source.fetch_headers("abc-123")

    @responses.activate
    def test_connection_error(self, source):
        responses.add(
            responses.GET,
            "https://data.example.gov/resource/abc-123.json",
            body=requests.ConnectionError("reset"),
        )
        with pytest.raises(HeaderCheckError, match="reset"):
            source.fetch_headers("abc-123")


class TestOpenContentStream:
    """Tests for content streams."""

    @responses.activate
    def test_stream_starts_paused(self, source):
        responses.add(responses.GET, "https://data.example.gov/resource/abc-123.csv", body=b"a,b\n1,2\n")

        stream = source.open_content_stream("abc-123")

        assert stream.state == StreamState.PAUSED
        assert b"".join(stream.start()) == b"a,b\n1,2\n"
        stream.close()
        assert stream.state == StreamState.CLOSED

    @responses.activate
    def test_requested_format(self):
        responses.add(responses.GET, "https://data.example.gov/resource/abc-123.json", body=b"[]")
        stream = SocrataSource("data.example.gov", fmt="json").open_content_stream("abc-123")
        assert b"".join(stream.start()) == b"[]"

    @responses.activate
    def test_error_status(self, source):
        responses.add(responses.GET, "https://data.example.gov/resource/abc-123.csv", status=500)
        with pytest.raises(TransferError) as exc_info:
            source.open_content_stream("abc-123")
        assert exc_info.value.item_id == "abc-123"
