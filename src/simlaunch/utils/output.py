"""Rich console helpers for terminal output and logging."""

import logging
from typing import Any

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.markup import escape


class Console:
    """Wrapper around rich.Console with convenience methods."""

    def __init__(self) -> None:
        self._console = RichConsole()
        self._err_console = RichConsole(stderr=True)
        self._json_mode = False

    def set_json_mode(self, enabled: bool) -> None:
        """Enable or disable JSON mode (suppresses rich output)."""
        self._json_mode = enabled

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (suppressed in JSON mode)."""
        if not self._json_mode:
            self._console.print(*args, **kwargs)

    def print_log_line(self, channel: str, text: str) -> None:
        """Print a forwarded simulator log line, tagged with its channel."""
        if self._json_mode:
            return
        style = "red" if channel == "stderr" else "dim"
        self._console.print(
            f"[{style}]\\[{channel}][/{style}] {escape(text)}",
            highlight=False,
        )

    def print_success(self, message: str) -> None:
        """Print a success message in green."""
        if not self._json_mode:
            self._console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message in red."""
        if not self._json_mode:
            self._console.print(f"[red]✗[/red] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message in blue."""
        if not self._json_mode:
            self._console.print(f"[blue]ℹ[/blue] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        if not self._json_mode:
            self._console.print(f"[yellow]⚠[/yellow] {message}")

    def setup_logging(self, verbose: bool = False) -> None:
        """Route the ``simlaunch`` loggers through rich on stderr."""
        handler = RichHandler(
            console=self._err_console,
            show_path=False,
            rich_tracebacks=True,
        )
        logger = logging.getLogger("simlaunch")
        logger.handlers[:] = [handler]
        logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
        logger.propagate = False


# Global console instance
console = Console()
