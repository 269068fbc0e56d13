"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
per-page progress lines, a spinner while the page tree is discovered,
colored status messages and the end-of-run summary. Supports verbosity
levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner

from src.tree_mirror.models import SyncSummary


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary and per-page lines, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Saved: Engineering/index.md")
        >>> with handler.spinner("Fetching page tree..."):
        ...     records = discoverer.discover(root_id)
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message, markup=False)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single long-running operations.

        Example:
            >>> with handler.spinner("Fetching page tree..."):
            ...     pass
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_summary(self, summary: SyncSummary) -> None:
        """Display the end-of-run summary with color coding.

        Args:
            summary: Counters collected during the run
        """
        self.console.print("\n[bold]Sync Summary:[/bold]")
        self.console.print(f"  [blue]↓[/blue] Discovered: {summary.discovered} page(s)")
        self.console.print(f"  [green]✓[/green] Written: {summary.written} page(s)")

        if summary.skipped > 0:
            self.console.print(f"  [yellow]⚠[/yellow] Skipped (conversion failed): {summary.skipped} page(s)")

        if summary.failed > 0:
            self.console.print(f"  [red]✗[/red] Failed to write: {summary.failed} page(s)")

        if summary.collisions > 0:
            self.console.print(f"  [yellow]⚡[/yellow] Path collisions: {summary.collisions} page(s)")

        if summary.discovery_failures:
            self.console.print(
                f"  [red]✗[/red] Subtrees not discovered: {len(summary.discovery_failures)}"
            )

        if summary.discovered == 0:
            self.console.print("\n[yellow]No pages to sync[/yellow]")
        elif summary.is_partial:
            self.console.print("\n[yellow]Sync completed with errors (see log above)[/yellow]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")

    def print_dryrun_summary(self, destinations: List[str], collisions: int = 0) -> None:
        """Display the files a dry run would write.

        Args:
            destinations: Vault-relative paths that would be written, in order
            collisions: How many of them overwrite a path claimed earlier in the run
        """
        self.console.print("\n[bold]Dry Run - Changes Preview:[/bold]")

        if not destinations:
            self.console.print("\n[yellow]No pages to sync[/yellow]")
            return

        self.console.print(f"\n[blue]Would write ({len(destinations)} file(s)):[/blue]")
        for destination in destinations:
            self.console.print(f"  {destination}", markup=False)

        if collisions:
            self.console.print(
                f"\n[yellow]⚡ {collisions} page(s) would overwrite another page's file[/yellow]"
            )

        self.console.print("\n[dim]No files were written[/dim]")
