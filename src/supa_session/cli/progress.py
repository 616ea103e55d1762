"""Progress indicators for CLI operations.

Rich-based spinners and one-line status messages shared by all commands.
"""

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.status import Status

# Shared console instance
console = Console()


@contextmanager
def api_spinner(message: str) -> Generator[Status, None, None]:
    """Spinner for backend calls with unknown duration.

    Usage:
        with api_spinner("Logging in..."):
            session = asyncio.run(manager.login(email, password))

    Args:
        message: Status message to display during operation

    Yields:
        Rich Status object for updating the message if needed
    """
    with console.status(f"[bold green]{message}", spinner="dots") as status:
        yield status


@contextmanager
def oauth_progress(provider: str) -> Generator[Status, None, None]:
    """Spinner while the user completes the provider sign-in in the browser."""
    with console.status(
        f"[bold blue]Waiting for {provider} sign-in in the browser...",
        spinner="dots",
    ) as status:
        yield status


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message with X mark."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")
