# catalog-it Filesystem Storage
# Local directory backend, one file per storage key

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from catalog_it.utils.paths import atomic_copy_stream, ensure_dir, expand_path, resolve_key

logger = logging.getLogger(__name__)


class FilesystemStorage:
    """Stores archives below a local directory, keys mapped to relative paths."""

    def __init__(self, root: str | Path):
        self.root = expand_path(root)

    def prepare(self) -> None:
        """Create the root directory."""
        ensure_dir(self.root)

    def upload(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        concurrency: int = 1,
        content_encoding: Optional[str] = None,
    ) -> str:
        """Copy the stream to ``root/key`` atomically and return the file path."""
        path = resolve_key(self.root, key)
        written = atomic_copy_stream(fileobj, path)
        logger.debug("Wrote %d bytes to %s", written, path)
        return str(path)
