# catalog-it Configuration Loader
# Layered configuration: explicit arguments > environment > file > defaults

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from catalog_it.config.defaults import DEFAULT_CONFIG, generate_default_config
from catalog_it.config.schema import CatalogItConfig
from catalog_it.errors import ConfigurationError

ENV_PREFIX = "CATALOG_IT_"
CONFIG_ENV = "CATALOG_IT_CONFIG"


def get_config_dir() -> Path:
    """Get the catalog-it configuration directory."""
    return Path.home() / ".config" / "catalog-it"


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the path to the configuration file."""
    environ = os.environ if environ is None else environ
    # Allow override via environment variable
    env_path = environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def read_config_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML configuration file.

    Returns:
        The mapping stored in the file, empty if the file does not exist.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root is not a mapping: {config_path}")
    return data


def read_environment(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Collect CATALOG_IT_<KEY> variables for the known configuration keys."""
    environ = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key in DEFAULT_CONFIG:
        value = environ.get(ENV_PREFIX + key.upper())
        if value is not None and value != "":
            values[key] = value
    return values


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> CatalogItConfig:
    """
    Build the effective configuration.

    Explicit overrides win, then environment variables, then the config
    file, then built-in defaults. Override values of None are ignored so
    unset command line options fall through to the lower layers.

    Args:
        overrides: Explicit values, usually from command line options.
        config_path: Config file path. Uses the default if not provided.
        environ: Environment mapping. Uses os.environ if not provided.

    Returns:
        CatalogItConfig: Validated configuration object.

    Raises:
        ConfigurationError: If a layer is unreadable or the result is invalid.
    """
    if config_path is None:
        config_path = get_config_path(environ)

    merged: dict[str, Any] = dict(DEFAULT_CONFIG)
    merged.update(read_config_file(config_path))
    merged.update(read_environment(environ))
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CatalogItConfig.model_validate(merged)
    except ValidationError as e:
        messages = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            messages.append(f"{loc}: {error['msg']}")
        raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(messages)) from e


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating the default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True
