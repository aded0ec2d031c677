# catalog-it Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml

from catalog_it.config.defaults import DEFAULT_CONFIG, generate_default_config
from catalog_it.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    read_config_file,
    read_environment,
)
from catalog_it.config.schema import AccessPolicy, CatalogItConfig, StorageBackendType
from catalog_it.errors import ConfigurationError


class TestCatalogItConfig:
    """Tests for CatalogItConfig schema."""

    def test_defaults(self):
        """Test built-in default values."""
        config = CatalogItConfig()
        assert config.catalog_id is None
        assert config.access_policy == "private"
        assert config.concurrency_limit == 5
        assert config.format == "csv"
        assert config.timeout_ms == 300_000
        assert config.timeout_seconds == 300.0
        assert config.compress is True
        assert config.storage_backend == "s3"

    def test_defaults_match_template(self):
        """Test that the YAML template and the dict defaults agree."""
        assert yaml.safe_load(generate_default_config()) == DEFAULT_CONFIG
        assert CatalogItConfig.model_validate(DEFAULT_CONFIG) == CatalogItConfig()

    def test_format_normalized(self):
        """Test format normalization."""
        assert CatalogItConfig(format=" .JSON ").format == "json"

    def test_empty_format(self):
        """Test empty format is rejected."""
        with pytest.raises(ValueError):
            CatalogItConfig(format=" . ")

    def test_prefix_slashes_stripped(self):
        assert CatalogItConfig(key_prefix="/archives/").key_prefix == "archives"

    @pytest.mark.parametrize("limit", [0, -3])
    def test_invalid_concurrency(self, limit):
        with pytest.raises(ValueError):
            CatalogItConfig(concurrency_limit=limit)

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            CatalogItConfig(bucket="typo")

    def test_enum_values(self):
        """Test enum values."""
        assert AccessPolicy.PUBLIC_READ.value == "public-read"
        assert StorageBackendType.FILESYSTEM.value == "filesystem"

    def test_cache_path_expanded(self, temp_home):
        assert CatalogItConfig().cache_path == temp_home / ".catalog-it"

    def test_require_catalog_id(self):
        with pytest.raises(ConfigurationError, match="--catalog"):
            CatalogItConfig().require_catalog_id()
        assert CatalogItConfig(catalog_id="data.example.gov").require_catalog_id() == "data.example.gov"

    def test_require_bucket(self):
        with pytest.raises(ConfigurationError, match="--bucket"):
            CatalogItConfig().require_bucket()


class TestLoadConfig:
    """Tests for layered configuration loading."""

    def test_defaults_only(self, temp_dir: Path):
        """Test loading without file, environment or overrides."""
        config = load_config(config_path=temp_dir / "missing.yaml", environ={})
        assert config == CatalogItConfig()

    def test_file_layer(self, temp_dir: Path):
        """Test values from the config file."""
        path = temp_dir / "config.yaml"
        path.write_text("catalog_id: data.example.gov\nconcurrency_limit: 8\n", encoding="utf-8")

        config = load_config(config_path=path, environ={})

        assert config.catalog_id == "data.example.gov"
        assert config.concurrency_limit == 8

    def test_environment_beats_file(self, temp_dir: Path):
        """Test environment variables override the file."""
        path = temp_dir / "config.yaml"
        path.write_text("catalog_id: from-file\nconcurrency_limit: 8\n", encoding="utf-8")
        environ = {"CATALOG_IT_CATALOG_ID": "from-env", "CATALOG_IT_COMPRESS": "false"}

        config = load_config(config_path=path, environ=environ)

        assert config.catalog_id == "from-env"
        assert config.concurrency_limit == 8
        assert config.compress is False

    def test_overrides_beat_environment(self, temp_dir: Path):
        """Test explicit overrides win, and None overrides are ignored."""
        environ = {"CATALOG_IT_CATALOG_ID": "from-env", "CATALOG_IT_CONCURRENCY_LIMIT": "3"}

        config = load_config(
            {"catalog_id": "from-cli", "concurrency_limit": None},
            config_path=temp_dir / "missing.yaml",
            environ=environ,
        )

        assert config.catalog_id == "from-cli"
        assert config.concurrency_limit == 3

    def test_invalid_value(self, temp_dir: Path):
        """Test validation errors become ConfigurationError."""
        with pytest.raises(ConfigurationError, match="concurrency_limit"):
            load_config({"concurrency_limit": 0}, config_path=temp_dir / "missing.yaml", environ={})

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("catalog_id: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_path=path, environ={})

    def test_non_mapping(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("- a\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            read_config_file(path)

    def test_empty_file(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert read_config_file(path) == {}


class TestEnvironment:
    """Tests for environment variables."""

    def test_known_keys_only(self):
        environ = {
            "CATALOG_IT_STORAGE_BUCKET": "bucket",
            "CATALOG_IT_UNKNOWN": "x",
            "CATALOG_IT_KEY_PREFIX": "",
            "HOME": "/home/x",
        }
        assert read_environment(environ) == {"storage_bucket": "bucket"}

    def test_config_path_override(self, temp_dir: Path):
        environ = {"CATALOG_IT_CONFIG": str(temp_dir / "custom.yaml")}
        assert get_config_path(environ) == temp_dir / "custom.yaml"

    def test_default_config_path(self, temp_home: Path):
        assert get_config_path({}) == temp_home / ".config" / "catalog-it" / "config.yaml"


class TestEnsureConfigExists:
    """Tests for ensure_config_exists function."""

    def test_creates_default(self, temp_dir: Path):
        path = temp_dir / "nested" / "config.yaml"

        config_path, created = ensure_config_exists(path)

        assert created is True
        assert config_path == path
        assert yaml.safe_load(path.read_text(encoding="utf-8")) == DEFAULT_CONFIG

    def test_existing_untouched(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("catalog_id: mine\n", encoding="utf-8")

        _, created = ensure_config_exists(path)

        assert created is False
        assert path.read_text(encoding="utf-8") == "catalog_id: mine\n"
