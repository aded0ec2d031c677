# catalog-it Storage Interface
# Capability the transfer pipeline writes into

from typing import BinaryIO, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """Durable blob storage accepting streamed uploads."""

    def prepare(self) -> None:
        """Provision the destination (bucket or directory) if needed."""
        ...

    def upload(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        concurrency: int = 1,
        content_encoding: Optional[str] = None,
    ) -> str:
        """
        Stream ``fileobj`` into storage under ``key``.

        Args:
            key: Destination key.
            fileobj: Readable, not necessarily seekable, binary stream.
            concurrency: Maximum parallel part uploads for this object.
            content_encoding: Encoding of the stored bytes, e.g. "gzip".

        Returns:
            Location of the stored object (URI or path).
        """
        ...
