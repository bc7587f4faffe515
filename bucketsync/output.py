"""Console output for sync runs."""

from typing import Optional

from rich.console import Console
from rich.markup import escape


class OutputFormatter:
    """Formats user-facing messages with Rich.

    Informational output goes to stdout, warnings and errors to stderr.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            quiet: Suppress informational messages
            console: Console for regular output (created if not provided)
        """
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain message."""
        if not self.quiet:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self.quiet:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if not self.quiet:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning. Shown even in quiet mode."""
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error. Shown even in quiet mode."""
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")
