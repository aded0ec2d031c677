# catalog-it Socrata Source
# Discovery, header probes and content streams for Socrata portals

import logging
from collections.abc import Mapping
from typing import Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from catalog_it.catalog.model import Catalog, Item
from catalog_it.errors import ConfigurationError, DiscoveryError, HeaderCheckError, TransferError
from catalog_it.sync.transfer import DEFAULT_CHUNK_SIZE, SourceStream
from catalog_it.utils.timestamps import to_iso, utc_now

logger = logging.getLogger(__name__)

BROWSE_PATH = "/browse/embed?limitTo=datasets&utf8=%E2%9C%93&page=1&limit=5000"
USER_AGENT = "catalog-it (+https://github.com/catalog-it/catalog-it)"


class SocrataSource:
    """
    Socrata open data portal.

    The portal has no listing API usable without a token, so discovery
    scrapes the embeddable browse page. Header probes use a streamed GET
    since the resource endpoint does not answer HEAD requests.
    """

    def __init__(
        self,
        catalog_id: str,
        *,
        fmt: str = "csv",
        timeout: float = 300.0,
        session: Optional[requests.Session] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize Socrata source.

        Args:
            catalog_id: Portal domain, e.g. ``data.example.gov``.
            fmt: Export format for content streams.
            timeout: Connect and read timeout in seconds.
            session: HTTP session to use (a new one if not provided).
            chunk_size: Bytes per chunk of content streams.

        Raises:
            ConfigurationError: If no catalog is given.
        """
        if not catalog_id:
            raise ConfigurationError("No catalog provided to the Socrata source.")

        self.catalog_id = catalog_id
        self.format = fmt
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    @property
    def base_url(self) -> str:
        """Root URL of the portal."""
        return f"https://{self.catalog_id}"

    @property
    def catalog_url(self) -> str:
        """URL of the dataset listing."""
        return self.base_url + BROWSE_PATH

    def resource_url(self, item_id: str, fmt: Optional[str] = None) -> str:
        """URL of an item's content in the given format."""
        return f"{self.base_url}/resource/{item_id}.{fmt or self.format}"

    def discover_catalog(self) -> Catalog:
        """
        Fetch the dataset listing.

        Returns:
            Catalog with one item per listed dataset and no history fields.

        Raises:
            DiscoveryError: If the request fails or returns a non-success status.
        """
        url = self.catalog_url
        logger.debug("Fetching catalog: %s", self.catalog_id)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise DiscoveryError(f"Error getting catalog {self.catalog_id}: {e}") from e

        if response.status_code >= 300:
            raise DiscoveryError(f"Response getting catalog {self.catalog_id} was {response.status_code}")

        catalog = Catalog(source_id=self.catalog_id, source_url=url, modified_at=to_iso(utc_now()))
        for item in self.parse_listing(response.text):
            catalog.add_item(item)

        logger.debug("Fetched catalog: %s (%d items)", self.catalog_id, len(catalog))
        return catalog

    def parse_listing(self, html: str) -> list[Item]:
        """Extract items from the browse page markup."""
        soup = BeautifulSoup(html, "html.parser")
        items: list[Item] = []

        for row in soup.select("table.gridList tr.item"):
            item_id = row.get("data-viewid")
            link = row.select_one("td.richSection a.nameLink")
            if not item_id or link is None:
                continue

            href = link.get("href")
            items.append(
                Item(
                    id=item_id,
                    display_name=link.get_text().strip(),
                    source_link=urljoin(self.base_url + "/", href) if href else None,
                )
            )

        return items

    def fetch_headers(self, item_id: str) -> Mapping[str, str]:
        """
        Probe an item's content headers.

        Requests a single row with a streamed GET and closes the connection
        as soon as the headers arrived; the body is never read.

        Raises:
            HeaderCheckError: If the request fails or returns a non-success status.
        """
        url = f"{self.base_url}/resource/{item_id}.json"
        logger.debug("Fetching headers: %s", item_id)
        try:
            response = self.session.get(url, params={"$limit": 1}, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise HeaderCheckError(item_id, f"{url} | {e}") from e

        try:
            if response.status_code >= 300:
                raise HeaderCheckError(item_id, f"Response getting headers was {response.status_code}")
            headers = dict(response.headers)
        finally:
            response.close()

        logger.debug("Fetched headers: %s", item_id)
        return headers

    def open_content_stream(self, item_id: str) -> SourceStream:
        """
        Open an item's content for streaming.

        The response headers are received here; the body stays unread until
        the returned stream is started.

        Raises:
            TransferError: If the request fails or returns a non-success status.
        """
        url = self.resource_url(item_id)
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransferError(item_id, url, e) from e

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            response.close()
            raise TransferError(item_id, url, e) from e

        return SourceStream(
            item_id,
            lambda: response.iter_content(chunk_size=self.chunk_size),
            close=response.close,
        )
