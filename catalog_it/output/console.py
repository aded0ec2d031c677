# catalog-it Console Output
# Rich-based console output for catalog and scan display

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable, Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from catalog_it.catalog.model import Catalog, Item
from catalog_it.sync.scanner import ScanOutcome, ScanResult


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for catalog and scan operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, console: Optional[RichConsole] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            console: Rich console to wrap (a new one if not provided).
        """
        self.verbose = verbose
        self._console = console or RichConsole(no_color=not colored, highlight=False)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_catalog(self, catalog: Catalog) -> None:
        """
        Print the items of a catalog and their sync state.

        Args:
            catalog: Catalog to display.
        """
        pending = len(catalog.pending_items())
        self._console.print(
            f"\n[bold]{catalog.source_id}[/bold] - {len(catalog)} items, "
            f"[yellow]{pending} pending[/yellow]"
            + (f" [dim](updated {catalog.modified_at})[/dim]" if catalog.modified_at else "")
        )

        if not catalog.items:
            self._console.print("  [dim]No items found[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Modified")
        table.add_column("Saved")
        table.add_column("State", justify="center")

        for item in sorted(catalog.items.values(), key=lambda i: i.display_name.lower()):
            if not self.verbose and item.needs_update is False:
                continue
            table.add_row(
                item.id,
                escape(item.display_name),
                item.last_modified_remote or "-",
                item.last_saved or "[dim]never[/dim]",
                self._state_marker(item),
            )

        self._console.print(table)

    def _state_marker(self, item: Item) -> str:
        """Get marker for an item's update state."""
        if item.needs_update is None:
            return "[dim]?[/dim]"
        if item.needs_update:
            return "[yellow]↑[/yellow]"
        return "[green]✓[/green]"

    @contextmanager
    def scan_progress(self, description: str, total: int) -> Iterator[Callable[[ScanOutcome[Any]], None]]:
        """
        Show a progress bar for a scan.

        Yields:
            Callback to pass as the scan's ``on_outcome``.
        """
        progress = Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        with progress:
            task = progress.add_task(description, total=total)

            def advance(outcome: ScanOutcome[Any]) -> None:
                progress.advance(task)
                if not outcome.succeeded:
                    progress.console.print(f"  [red]✗[/red] {outcome.item_id}: {escape(str(outcome.error))}")

            yield advance

    def print_scan_result(self, title: str, result: ScanResult[Any]) -> None:
        """
        Print scan result summary.

        Args:
            title: Name of the scan, e.g. "Headers".
            result: Scan result to display.
        """
        text = f"Items: {result.succeeded}/{result.total} succeeded, {len(result.failures)} failed"
        if result.failures:
            text += "\n"
            for failure in result.failures:
                text += f"\n[red]✗[/red] {failure.item_id}: {escape(failure.message)}"

        if result.success:
            self._console.print(Panel(f"[green]{title} completed[/green]\n{text}", title=title, border_style="green"))
        else:
            self._console.print(
                Panel(f"[red]{title} completed with errors[/red]\n{text}", title=title, border_style="red")
            )
