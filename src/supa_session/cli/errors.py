"""User-friendly error messages with actionable suggestions."""

from dataclasses import dataclass

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from supa_session.api.exceptions import (
    AuthenticationFailed,
    MissingField,
    NetworkError,
    NoActiveSession,
    OAuthFailed,
    RefreshFailed,
    StoreError,
)


@dataclass
class ErrorInfo:
    """Structured error information for display."""

    title: str
    message: str
    suggestion: str
    command: str | None = None


ERROR_MESSAGES = {
    "auth_failed": ErrorInfo(
        title="Login failed",
        message="{detail}",
        suggestion="Check your email and password and try again.",
        command="supa-session login",
    ),
    "oauth_failed": ErrorInfo(
        title="Sign-in failed",
        message="The provider sign-in could not be completed: {detail}",
        suggestion="Start the sign-in again.",
        command="supa-session oauth {provider}",
    ),
    "refresh_failed": ErrorInfo(
        title="Session expired",
        message="Your session could not be renewed.",
        suggestion="Log in again.",
        command="supa-session login",
    ),
    "missing_field": ErrorInfo(
        title="Unexpected server response",
        message="The server response was incomplete.",
        suggestion="This is probably a temporary problem. Try again later.",
        command=None,
    ),
    "no_session": ErrorInfo(
        title="Not logged in",
        message="You need to log in before doing this.",
        suggestion="Log in with your account.",
        command="supa-session login",
    ),
    "network_error": ErrorInfo(
        title="Network error",
        message="Could not reach the authentication server.",
        suggestion="Check your internet connection and the configured URL.",
        command="supa-session config show",
    ),
    "store_error": ErrorInfo(
        title="Keyring error",
        message="Your credentials could not be saved or read.",
        suggestion="Make sure the system keyring is unlocked and available.",
        command=None,
    ),
    "unknown": ErrorInfo(
        title="Unexpected error",
        message="An unexpected error occurred.",
        suggestion="If this keeps happening, log out and log in again.",
        command="supa-session logout && supa-session login",
    ),
}


def get_error_type(error: Exception) -> str:
    """Determine error type from exception."""
    if isinstance(error, AuthenticationFailed):
        return "auth_failed"
    elif isinstance(error, OAuthFailed):
        return "oauth_failed"
    elif isinstance(error, RefreshFailed):
        return "refresh_failed"
    elif isinstance(error, MissingField):
        return "missing_field"
    elif isinstance(error, NoActiveSession):
        return "no_session"
    elif isinstance(error, NetworkError):
        return "network_error"
    elif isinstance(error, StoreError):
        return "store_error"
    return "unknown"


def format_error(
    error: Exception,
    console: Console,
    provider: str | None = None,
    verbose: bool = False,
) -> None:
    """Format and display a user-friendly error message."""
    error_type = get_error_type(error)
    info = ERROR_MESSAGES.get(error_type, ERROR_MESSAGES["unknown"])

    # Backend error text is shown as-is for rejected grants
    detail = getattr(error, "detail", None) or str(error)
    message = info.message.format(detail=escape(detail))
    command = info.command
    if command and "{provider}" in command:
        command = command.format(provider=provider or "<provider>")

    content_lines = [
        f"[white]{message}[/white]",
        "",
        f"[yellow]Suggestion:[/yellow] {info.suggestion}",
    ]

    if command:
        content_lines.append("")
        content_lines.append(f"[cyan]{command}[/cyan]")

    # Show technical details in verbose mode
    if verbose:
        content_lines.append("")
        content_lines.append("[dim]" + "─" * 40 + "[/dim]")
        content_lines.append(f"[dim]Type: {type(error).__name__}[/dim]")
        content_lines.append(f"[dim]Details: {escape(str(error))}[/dim]")

    console.print()
    console.print(Panel(
        "\n".join(content_lines),
        title=f"[red bold]Error: {info.title}[/red bold]",
        border_style="red",
        padding=(1, 2),
    ))
    console.print()
