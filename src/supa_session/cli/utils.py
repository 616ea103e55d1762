"""CLI utility functions and decorators."""

from contextlib import asynccontextmanager
from functools import wraps
from typing import AsyncIterator, Callable, TypeVar

import typer
from rich.console import Console

from supa_session.api.client import BackendAuthClient
from supa_session.api.exceptions import AuthError
from supa_session.auth.credential_store import CredentialStore
from supa_session.auth.session_manager import SessionManager
from supa_session.cli.errors import format_error
from supa_session.config import Settings, get_settings

console = Console()

# Global CLI options, set by the root callback
state = {"verbose": False}

F = TypeVar("F", bound=Callable)


@asynccontextmanager
async def open_manager(settings: Settings | None = None) -> AsyncIterator[SessionManager]:
    """Session manager wired from settings, warm-started from the keyring.

    Settings are read here, once, and injected; the core never looks at
    the environment itself.
    """
    settings = settings or get_settings()
    async with BackendAuthClient(
        settings.url,
        settings.anon_key,
        timeout=settings.timeout,
    ) as client:
        manager = SessionManager(client, CredentialStore(settings.keyring_service))
        manager.restore_from_store()
        yield manager


def format_time_remaining(seconds: int) -> str:
    """Format remaining lifetime in a human-readable way."""
    minutes = seconds // 60
    if minutes < 1:
        return "less than a minute"
    elif minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours, mins = divmod(minutes, 60)
    parts = [f"{hours} hour{'s' if hours != 1 else ''}"]
    if mins > 0:
        parts.append(f"{mins} min")
    return " ".join(parts)


def handle_auth_errors(f: F) -> F:
    """Decorator to handle session errors in CLI commands.

    Any AuthError is rendered as a panel with a suggestion and the command
    exits with status 1.

    Usage:
        @app.command()
        @handle_auth_errors
        def my_command():
            ...
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AuthError as e:
            format_error(e, console, provider=kwargs.get("provider"), verbose=state["verbose"])
            raise typer.Exit(1)

    return wrapper  # type: ignore
