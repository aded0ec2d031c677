# catalog-it Default Configuration
# Built-in defaults as Python dict and commented YAML template

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "catalog_id": None,
    "storage_bucket": None,
    "access_policy": "private",
    "concurrency_limit": 5,
    "format": "csv",
    "key_prefix": "",
    "timeout_ms": 300_000,
    "credential_profile": None,
    "create_bucket_on_start": False,
    "compress": True,
    "cache_dir": "~/.catalog-it",
    "storage_backend": "s3",
    "storage_dir": None,
    "chunk_concurrency": 5,
}


def generate_default_config() -> str:
    """
    Generate the default configuration file with comments.

    Returns:
        YAML string.
    """
    return """\
# catalog-it configuration
#
# Every key can be overridden by an environment variable named
# CATALOG_IT_<KEY> (for example CATALOG_IT_CATALOG_ID) and by the
# matching command line option, which wins over both.

# Domain of the Socrata catalog to mirror
catalog_id: null

# Where archives go: "s3" or "filesystem"
storage_backend: s3
storage_bucket: null
storage_dir: null

# private | public-read | public-read-write | authenticated-read
access_policy: private
create_bucket_on_start: false
credential_profile: null

# Prefix for every storage key, e.g. "archives"
key_prefix: ""

# Export format requested from the catalog
format: csv
compress: true

# Items processed at once, and parallel part uploads per item
concurrency_limit: 5
chunk_concurrency: 5

# Timeout of each network operation
timeout_ms: 300000

cache_dir: ~/.catalog-it
"""
