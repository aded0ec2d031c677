"""Click-based CLI for catalog-it - mirror a dataset catalog into blob storage."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

import click
import yaml

from catalog_it import __version__
from catalog_it.config import CatalogItConfig, ensure_config_exists, get_config_path, load_config
from catalog_it.errors import CatalogItError
from catalog_it.logger import configure_logging
from catalog_it.output import Console
from catalog_it.sync.engine import CatalogSync
from catalog_it.sync.scanner import ScanResult

console = Console()


def config_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every command that talks to a catalog."""
    options = [
        click.option("--catalog", "-c", "catalog_id", help="Catalog domain, e.g. data.example.gov"),
        click.option("--bucket", "-b", "storage_bucket", help="S3 bucket receiving the archives"),
        click.option("--prefix", "key_prefix", help="Prefix for every storage key"),
        click.option("--concurrency", "concurrency_limit", type=int, help="Items processed at once (default: 5)"),
        click.option("--format", "format", help="Export format requested from the catalog (default: csv)"),
        click.option("--timeout-ms", "timeout_ms", type=int, help="Network timeout in milliseconds"),
        click.option("--profile", "credential_profile", help="Named AWS credentials profile"),
        click.option(
            "--acl",
            "access_policy",
            type=click.Choice(["private", "public-read", "public-read-write", "authenticated-read"]),
            help="Canned ACL for bucket and objects (default: private)",
        ),
        click.option(
            "--create-bucket/--no-create-bucket",
            "create_bucket_on_start",
            default=None,
            help="Create the bucket before transferring",
        ),
        click.option("--compress/--no-compress", "compress", default=None, help="Gzip archives in flight"),
        click.option("--cache-dir", "cache_dir", type=click.Path(path_type=Path), help="Catalog cache directory"),
        click.option(
            "--backend",
            "storage_backend",
            type=click.Choice(["s3", "filesystem"]),
            help="Archive destination (default: s3, or filesystem with --storage-dir)",
        ),
        click.option(
            "--storage-dir",
            "storage_dir",
            type=click.Path(file_okay=False, path_type=Path),
            help="Write archives below this directory instead of S3",
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Configuration file (default: ~/.config/catalog-it/config.yaml)",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Show detailed output"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load(options: dict[str, Any]) -> CatalogItConfig:
    """Resolve the configuration from command line options, environment and file."""
    config_path = options.pop("config_path", None)
    overrides = {key: (str(value) if isinstance(value, Path) else value) for key, value in options.items()}
    if overrides.get("storage_dir") and not overrides.get("storage_backend"):
        overrides["storage_backend"] = "filesystem"
    return load_config(overrides, config_path=config_path)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Print catalog-it errors and exit with status 1."""
    try:
        yield
    except CatalogItError as e:
        console.print_error(str(e))
        sys.exit(1)


def _engine(options: dict[str, Any], *, verbose: bool, with_storage: bool = True) -> CatalogSync:
    configure_logging(verbose)
    console.verbose = verbose
    config = _load(options)
    return CatalogSync.from_config(config, with_storage=with_storage)


def _run_headers(engine: CatalogSync) -> ScanResult:
    total = len(engine.catalog.items)
    with console.scan_progress("Headers", total) as advance:
        result = engine.scan_headers(on_outcome=advance)
    console.print_scan_result("Headers", result)
    return result


def _run_data(engine: CatalogSync, force: bool = False) -> ScanResult:
    total = len(engine.pending_items(force=force))
    if total == 0:
        console.print_success("Everything is archived!")
        return ScanResult()
    with console.scan_progress("Data", total) as advance:
        result = engine.scan_data(force=force, on_outcome=advance)
    console.print_scan_result("Data", result)
    return result


@click.group()
@click.version_option(version=__version__, prog_name="catalog-it")
def cli() -> None:
    """catalog-it - mirror a dataset catalog and archive its datasets.

    \b
    Workflow:
      update   Discover the remote catalog and merge it into the local cache
      headers  Check every dataset for changes
      data     Archive changed datasets to storage
      run      All three in sequence
    """
    pass


@cli.command()
@config_options
def update(verbose: bool, **options: Any) -> None:
    """Discover the remote catalog and merge it with the cached one."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose, with_storage=False)
        catalog = engine.update_catalog()
        console.print_success(f"Catalog {catalog.source_id}: {len(catalog)} items")


@cli.command()
@config_options
def headers(verbose: bool, **options: Any) -> None:
    """Check every dataset's headers and flag the changed ones."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose, with_storage=False)
        result = _run_headers(engine)
    if result.has_failures:
        sys.exit(1)


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Archive every dataset, changed or not")
@config_options
def data(force: bool, verbose: bool, **options: Any) -> None:
    """Archive datasets that changed since their last save."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose)
        result = _run_data(engine, force=force)
    if result.has_failures:
        sys.exit(1)


@cli.command()
@config_options
def run(verbose: bool, **options: Any) -> None:
    """Update the catalog, check headers and archive changed datasets."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose)
        catalog = engine.update_catalog()
        console.print_success(f"Catalog {catalog.source_id}: {len(catalog)} items")
        header_result = _run_headers(engine)
        data_result = _run_data(engine)
    if header_result.has_failures or data_result.has_failures:
        sys.exit(1)


@cli.command()
@config_options
def status(verbose: bool, **options: Any) -> None:
    """Show the cached catalog and which datasets need archiving."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose, with_storage=False)
        summary = engine.status()
        console.print_catalog(engine.catalog)
        console.print_info(f"{summary.archived} archived, {summary.unchecked} never checked")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@config_options
def clear(yes: bool, verbose: bool, **options: Any) -> None:
    """Remove the cached catalog (archived data is not touched)."""
    with _handle_errors():
        engine = _engine(options, verbose=verbose, with_storage=False)
        if not yes and not click.confirm(f"Remove cached catalog for {engine.catalog_id}?", default=False):
            console.print_warning("Cancelled")
            return
        if engine.reset():
            console.print_success(f"Removed cached catalog for {engine.catalog_id}")
        else:
            console.print_info(f"No cached catalog for {engine.catalog_id}")


@cli.group("config")
def config_cmd() -> None:
    """Configuration file commands."""
    pass


@config_cmd.command("init")
@click.option("--path", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the file")
def config_init(path: Optional[Path]) -> None:
    """Create a default configuration file."""
    config_path, created = ensure_config_exists(path)
    if created:
        console.print_success(f"Created configuration: {config_path}")
    else:
        console.print_info(f"Configuration already exists: {config_path}")


@config_cmd.command("show")
@config_options
def config_show(verbose: bool, **options: Any) -> None:
    """Print the effective configuration."""
    with _handle_errors():
        config_path = options.get("config_path") or get_config_path()
        config = _load(options)
    console.print_info(f"Config file: {config_path}")
    console.print(yaml.dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False), markup=False)


def main() -> None:
    """Entry point for the catalog-it command."""
    cli()


if __name__ == "__main__":
    main()
