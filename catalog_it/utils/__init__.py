# catalog-it Utilities Module
# Helper functions for path handling and timestamps

from catalog_it.utils.paths import (
    atomic_copy_stream,
    atomic_write,
    ensure_dir,
    expand_path,
    resolve_key,
    safe_delete,
)
from catalog_it.utils.timestamps import (
    from_unix,
    parse_http_date,
    run_stamp,
    to_iso,
    utc_now,
)

__all__ = [
    # Paths
    "expand_path",
    "ensure_dir",
    "safe_delete",
    "atomic_write",
    "atomic_copy_stream",
    "resolve_key",
    # Timestamps
    "utc_now",
    "to_iso",
    "parse_http_date",
    "run_stamp",
    "from_unix",
]
