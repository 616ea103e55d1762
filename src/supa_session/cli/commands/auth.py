"""Authentication CLI commands."""

import asyncio
from datetime import datetime
from typing import Annotated

import typer
from rich.console import Console

from supa_session.api.models import Session, UserProfile
from supa_session.auth.oauth_callback import OAuthCallbackServer
from supa_session.cli.progress import (
    api_spinner,
    oauth_progress,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from supa_session.cli.utils import format_time_remaining, handle_auth_errors, open_manager
from supa_session.config import get_settings

console = Console()
app = typer.Typer(help="Authentication commands")


def _print_profile(user: UserProfile) -> None:
    if user.email:
        console.print(f"  User: [bold]{user.email}[/bold]")
    console.print(f"  Plan: [cyan]{user.tier}[/cyan]")
    quota_style = "green" if user.has_quota else "red"
    console.print(
        f"  Tokens: [{quota_style}]{user.tokens_remaining:,}[/{quota_style}]"
        f" / {user.daily_limit:,} per day"
    )
    if not user.has_quota:
        print_warning("Token quota used up.")


def _print_session(session: Session) -> None:
    _print_profile(session.user)
    if session.is_expired():
        console.print("  [yellow]Access token already expired[/yellow]")
    else:
        try:
            expires = datetime.fromtimestamp(session.expires_at)
        except (OverflowError, OSError, ValueError):
            # Out of range for the platform clock, e.g. milliseconds
            remaining = format_time_remaining(session.seconds_until_expiry())
            console.print(f"  [dim]Valid for: {remaining}[/dim]")
        else:
            console.print(f"  [dim]Valid until: {expires.strftime('%Y-%m-%d %H:%M')}[/dim]")


@app.command()
def status():
    """Show current authentication status."""

    async def _status():
        async with open_manager() as manager:
            return manager.session

    session = asyncio.run(_status())

    if session is None:
        console.print("[red]Not logged in[/red]")
        console.print("\nLog in with: [cyan]supa-session login[/cyan]")
        raise typer.Exit(1)

    if session.is_expired():
        console.print("[red]Session expired[/red]")
        _print_profile(session.user)
        console.print("\nRenew with: [cyan]supa-session refresh[/cyan]")
        raise typer.Exit(1)

    console.print("[green]Logged in[/green]")
    _print_profile(session.user)

    remaining = session.seconds_until_expiry()
    time_str = format_time_remaining(remaining)
    style = "yellow" if remaining <= 600 else "green"
    console.print(f"  Session expires in: [{style}]{time_str}[/{style}]")


@app.command("login")
@handle_auth_errors
def do_login(
    email: Annotated[
        str | None,
        typer.Option("--email", "-e", help="Account email"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Account password (prompted if omitted)"),
    ] = None,
):
    """
    Log in with email and password.

    The session is stored in the system keyring.
    """
    if email is None:
        email = typer.prompt("Email")
    if password is None:
        password = typer.prompt("Password", hide_input=True)

    email = email.strip()
    if not email or not password:
        print_error("Email and password are required")
        raise typer.Exit(1)

    async def _login():
        async with open_manager() as manager:
            return await manager.login(email, password)

    with api_spinner("Logging in..."):
        session = asyncio.run(_login())

    print_success("Login successful!")
    _print_session(session)


@app.command("oauth")
@handle_auth_errors
def do_oauth(
    provider: Annotated[str, typer.Argument(help="OAuth provider (e.g., google, github)")],
    port: Annotated[
        int | None,
        typer.Option("--port", help="Local callback port"),
    ] = None,
    no_browser: Annotated[
        bool,
        typer.Option("--no-browser", help="Print the sign-in URL instead of opening it"),
    ] = False,
):
    """
    Sign in through an OAuth provider.

    Opens the provider's sign-in page and waits for the redirect on a local
    callback port.
    """
    settings = get_settings()
    port = port or settings.oauth_callback_port

    try:
        server = OAuthCallbackServer(port)
    except OSError as e:
        print_error(f"Cannot listen on port {port}: {e}")
        raise typer.Exit(1)

    async def _oauth():
        async with open_manager(settings) as manager:
            url = manager.start_oauth(provider, server.redirect_uri)
            console.print(f"Sign-in URL: [cyan]{url}[/cyan]")
            if no_browser:
                print_info("Open the URL above in your browser to continue.")
            else:
                typer.launch(url)

            with oauth_progress(provider):
                code = await asyncio.to_thread(server.wait_for_code, settings.oauth_timeout)

            with api_spinner("Completing sign-in..."):
                return await manager.complete_oauth(code)

    try:
        session = asyncio.run(_oauth())
    finally:
        server.server_close()

    print_success("Sign-in successful!")
    _print_session(session)


@app.command("oauth-url")
def oauth_url(
    provider: Annotated[str, typer.Argument(help="OAuth provider (e.g., google, github)")],
    redirect_uri: Annotated[str, typer.Argument(help="Where the provider sends the code")],
):
    """Print the sign-in URL for a provider and a custom redirect."""

    async def _url():
        async with open_manager() as manager:
            return manager.start_oauth(provider, redirect_uri)

    console.print(asyncio.run(_url()), soft_wrap=True)


@app.command("oauth-complete")
@handle_auth_errors
def oauth_complete(
    code: Annotated[str, typer.Argument(help="Authorization code from the redirect")],
):
    """Finish a provider sign-in with an authorization code."""

    async def _complete():
        async with open_manager() as manager:
            return await manager.complete_oauth(code)

    with api_spinner("Completing sign-in..."):
        session = asyncio.run(_complete())

    print_success("Sign-in successful!")
    _print_session(session)


@app.command("refresh")
@handle_auth_errors
def do_refresh():
    """
    Renew the access token using the stored refresh token.

    Does not ask for the password again.
    """

    async def _refresh():
        async with open_manager() as manager:
            return await manager.refresh()

    with api_spinner("Refreshing session..."):
        session = asyncio.run(_refresh())

    print_success("Session refreshed!")
    _print_session(session)
    if session.is_expired():
        print_warning("The server did not report a new expiry time.")


@app.command("logout")
def do_logout():
    """Remove the stored session."""

    async def _logout():
        async with open_manager() as manager:
            was_authenticated = manager.is_authenticated()
            await manager.logout()
            return was_authenticated

    if asyncio.run(_logout()):
        print_success("Logged out.")
    else:
        print_warning("No stored session found.")


@app.command("profile")
@handle_auth_errors
def do_profile():
    """Reload plan and quota information without renewing tokens."""

    async def _profile():
        async with open_manager() as manager:
            return await manager.refresh_profile_only()

    with api_spinner("Loading profile..."):
        profile = asyncio.run(_profile())

    if profile is None:
        console.print("[red]Not logged in[/red]")
        console.print("\nLog in with: [cyan]supa-session login[/cyan]")
        raise typer.Exit(1)

    print_success("Profile updated")
    _print_profile(profile)
