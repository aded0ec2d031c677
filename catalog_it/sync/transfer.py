# catalog-it Transfer Pipeline
# Stream one item's content into storage with optional in-flight gzip

from __future__ import annotations

import io
import logging
import zlib
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO, Optional

from catalog_it.errors import TransferError

if TYPE_CHECKING:
    from catalog_it.storage.base import StorageBackend

logger = logging.getLogger(__name__)

GZIP_SUFFIX = ".gz"
DEFAULT_CHUNK_SIZE = 64 * 1024

# wbits for zlib that produce a gzip container instead of a raw zlib stream
_GZIP_WBITS = 16 + zlib.MAX_WBITS

ProgressCallback = Callable[[str, int], None]


class StreamState(str, Enum):
    """Flow state of a source stream."""

    PAUSED = "paused"
    FLOWING = "flowing"
    CLOSED = "closed"


class SourceStream:
    """
    Readable byte source for one item.

    Created paused: no content is pulled from the underlying connection until
    the transfer pipeline calls :meth:`start`, once the destination is ready.
    """

    def __init__(
        self,
        item_id: str,
        opener: Callable[[], Iterable[bytes]],
        *,
        close: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize source stream.

        Args:
            item_id: Id of the item whose content this is.
            opener: Returns the chunk iterable; called once, by start().
            close: Releases the underlying connection.
        """
        self.item_id = item_id
        self._opener = opener
        self._close = close
        self.state = StreamState.PAUSED

    @classmethod
    def from_fileobj(cls, item_id: str, fileobj: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> SourceStream:
        """Wrap a binary file object."""

        def chunks() -> Iterator[bytes]:
            while chunk := fileobj.read(chunk_size):
                yield chunk

        return cls(item_id, chunks, close=fileobj.close)

    @classmethod
    def from_bytes(cls, item_id: str, data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> SourceStream:
        """Wrap an in-memory payload."""
        return cls.from_fileobj(item_id, io.BytesIO(data), chunk_size)

    def start(self) -> Iterator[bytes]:
        """
        Start pulling content.

        Raises:
            RuntimeError: If the stream was already started or closed.
        """
        if self.state != StreamState.PAUSED:
            raise RuntimeError(f"Source stream for {self.item_id} is {self.state.value}, not paused")
        self.state = StreamState.FLOWING
        return iter(self._opener())

    def close(self) -> None:
        """Release the underlying connection."""
        if self.state == StreamState.CLOSED:
            return
        self.state = StreamState.CLOSED
        if self._close is not None:
            self._close()


class _PipelineReader(io.RawIOBase):
    """File-like view of a chunk iterator, gzip-encoding on the way through."""

    def __init__(
        self,
        item_id: str,
        chunks: Iterator[bytes],
        *,
        compress: bool,
        progress: Optional[ProgressCallback] = None,
    ):
        super().__init__()
        self.item_id = item_id
        self._chunks = chunks
        self._compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, _GZIP_WBITS) if compress else None
        self._progress = progress
        self._buffer = bytearray()
        self._eof = False
        self.bytes_read = 0
        self.bytes_out = 0

    def readable(self) -> bool:
        return True

    def _fill(self, size: int) -> None:
        while not self._eof and (size < 0 or len(self._buffer) < size):
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._eof = True
                if self._compressor is not None:
                    self._buffer += self._compressor.flush()
                break

            if not chunk:
                continue
            self.bytes_read += len(chunk)
            if self._compressor is not None:
                self._buffer += self._compressor.compress(chunk)
            else:
                self._buffer += chunk

    def read(self, size: Optional[int] = -1) -> bytes:
        if size is None:
            size = -1
        self._fill(size)

        if size < 0 or size >= len(self._buffer):
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]

        if data:
            self.bytes_out += len(data)
            self._report()
        return data

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)

    def _report(self) -> None:
        if self._progress is None:
            return
        try:
            self._progress(self.item_id, self.bytes_out)
        except Exception:
            logger.warning("Progress listener failed for %s", self.item_id, exc_info=True)


@dataclass
class TransferOptions:
    """Options for a single transfer."""

    compress: bool = True
    concurrency_hint: int = 5
    progress: Optional[ProgressCallback] = None

    def __post_init__(self) -> None:
        if self.concurrency_hint < 1:
            raise ValueError(f"concurrency_hint must be at least 1, got {self.concurrency_hint}")


@dataclass
class TransferReceipt:
    """Result of a successful transfer."""

    item_id: str
    key: str
    bytes_read: int
    bytes_transferred: int
    compressed: bool
    location: Optional[str] = None


def build_destination_key(prefix: str, catalog_id: str, relative_path: str, compress: bool) -> str:
    """
    Build the storage key ``prefix/catalogId/relativePath[.gz]``.

    An empty prefix is left out rather than producing a leading slash.
    """
    parts = [p.strip("/") for p in (prefix, catalog_id) if p and p.strip("/")]
    parts.append(relative_path.lstrip("/"))
    key = "/".join(parts)
    if compress:
        key += GZIP_SUFFIX
    return key


class TransferPipeline:
    """
    Moves item content from a source stream into a storage backend.

    The pipeline never touches catalog state; callers record the receipt.
    """

    def __init__(self, storage: StorageBackend, *, catalog_id: str, prefix: str = ""):
        """
        Initialize transfer pipeline.

        Args:
            storage: Destination backend.
            catalog_id: Identifier of the source catalog, part of every key.
            prefix: Optional key prefix.
        """
        self.storage = storage
        self.catalog_id = catalog_id
        self.prefix = prefix

    def destination_key(self, relative_path: str, *, compress: bool) -> str:
        """Full storage key for a path relative to this catalog."""
        return build_destination_key(self.prefix, self.catalog_id, relative_path, compress)

    def transfer(
        self,
        key: str,
        source: SourceStream,
        options: Optional[TransferOptions] = None,
    ) -> TransferReceipt:
        """
        Stream a source into storage.

        Args:
            key: Path relative to the catalog, e.g. ``"abc-123/2024-01-01T00:00:00Z__abc-123.csv"``.
            source: Paused source stream; the pipeline starts and closes it.
            options: Transfer options (compression, chunk concurrency, progress).

        Returns:
            TransferReceipt with byte counts and the destination key.

        Raises:
            TransferError: If reading the source or writing storage fails.
        """
        options = options or TransferOptions()
        destination = self.destination_key(key, compress=options.compress)

        logger.debug("Uploading: %s", destination)
        try:
            reader = _PipelineReader(
                source.item_id,
                source.start(),
                compress=options.compress,
                progress=options.progress,
            )
            location = self.storage.upload(
                destination,
                reader,
                concurrency=options.concurrency_hint,
                content_encoding="gzip" if options.compress else None,
            )
        except Exception as e:
            raise TransferError(source.item_id, destination, e) from e
        finally:
            source.close()

        logger.debug("Uploaded: %s (%d bytes)", destination, reader.bytes_out)
        return TransferReceipt(
            item_id=source.item_id,
            key=destination,
            bytes_read=reader.bytes_read,
            bytes_transferred=reader.bytes_out,
            compressed=options.compress,
            location=location,
        )
