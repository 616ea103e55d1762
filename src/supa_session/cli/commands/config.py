"""Config CLI commands for managing settings."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from supa_session.config import (
    CONFIG_PATH,
    Settings,
    get_settings,
    load_config,
    reset_settings,
    save_config,
)

console = Console()
app = typer.Typer(help="Manage configuration")

# Settings that can be configured via the config command
CONFIGURABLE_KEYS = {
    "url": {
        "description": "Backend base URL",
        "type": "str",
        "example": "https://abc.supabase.co",
    },
    "anon_key": {
        "description": "Public (anon) API key",
        "type": "str",
        "example": "eyJhbGciOi...",
    },
    "keyring_service": {
        "description": "Keyring service name for stored tokens",
        "type": "str",
        "example": "supa-session",
    },
    "timeout": {
        "description": "HTTP timeout in seconds (5-120)",
        "type": "int",
        "example": "30",
    },
    "oauth_callback_port": {
        "description": "Port for OAuth callback (1024-65535)",
        "type": "int",
        "example": "8765",
    },
    "oauth_timeout": {
        "description": "OAuth flow timeout in seconds (30-600)",
        "type": "int",
        "example": "300",
    },
}


def parse_value(key: str, value: str) -> str | int:
    """Parse string value to appropriate type based on key."""
    key_info = CONFIGURABLE_KEYS.get(key)
    if not key_info:
        return value

    if key_info["type"] == "int":
        try:
            return int(value)
        except ValueError:
            raise typer.BadParameter(f"'{value}' is not a valid number")
    return value


def validate_value(key: str, value: str | int) -> None:
    """Validate a config value."""
    if key == "timeout":
        if not isinstance(value, int) or not (5 <= value <= 120):
            raise typer.BadParameter("timeout must be between 5 and 120")
    elif key == "oauth_callback_port":
        if not isinstance(value, int) or not (1024 <= value <= 65535):
            raise typer.BadParameter("oauth_callback_port must be between 1024 and 65535")
    elif key == "oauth_timeout":
        if not isinstance(value, int) or not (30 <= value <= 600):
            raise typer.BadParameter("oauth_timeout must be between 30 and 600")
    elif key == "url":
        if not str(value).startswith(("http://", "https://")):
            raise typer.BadParameter("url must start with http:// or https://")


@app.command("show")
def config_show():
    """
    Show all settings and where they come from.

    Examples:
        supa-session config show
    """
    config = load_config()
    settings = get_settings()
    defaults = Settings.model_fields

    table = Table(title="supa-session configuration", show_header=True)
    table.add_column("Setting", style="cyan", width=20)
    table.add_column("Value", style="green", width=32)
    table.add_column("Source", style="dim", width=12)
    table.add_column("Description", style="dim", width=35)

    for key, info in CONFIGURABLE_KEYS.items():
        file_value = config.get(key)
        effective_value = getattr(settings, key, None)

        if file_value is not None:
            source = "config.yaml"
            display_value = str(file_value)
        elif effective_value != defaults[key].default:
            source = "env var"
            display_value = str(effective_value)
        else:
            source = "default"
            display_value = f"[dim]{effective_value}[/dim]"

        table.add_row(key, display_value, source, info["description"])

    console.print(table)
    if settings.is_placeholder:
        console.print(
            "[yellow]No backend configured.[/yellow] "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY or use 'supa-session config set'."
        )
    console.print()
    console.print(f"[dim]Config file: {CONFIG_PATH}[/dim]")


@app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Setting name")],
    value: Annotated[str, typer.Argument(help="New value")],
):
    """
    Set a configuration value.

    Examples:
        supa-session config set url https://abc.supabase.co
        supa-session config set timeout 60
    """
    if key not in CONFIGURABLE_KEYS:
        console.print(f"[red]Unknown setting:[/red] {key}")
        console.print()
        console.print("[bold]Available settings:[/bold]")
        for k, info in CONFIGURABLE_KEYS.items():
            console.print(f"  [cyan]{k}[/cyan] - {info['description']}")
        raise typer.Exit(1)

    parsed_value = parse_value(key, value)
    validate_value(key, parsed_value)

    config = load_config()
    config[key] = parsed_value
    save_config(config)
    reset_settings()

    console.print(f"[green]✓[/green] {key} = {parsed_value}")


@app.command("reset")
def config_reset(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset without confirmation"),
    ] = False,
):
    """
    Reset all settings to their defaults.

    Examples:
        supa-session config reset --force
    """
    if not CONFIG_PATH.exists():
        console.print("[yellow]No config file found.[/yellow]")
        return

    if not force:
        confirm = typer.confirm("Reset all settings?")
        if not confirm:
            console.print("[dim]Cancelled.[/dim]")
            return

    CONFIG_PATH.unlink()
    reset_settings()
    console.print("[green]✓[/green] Configuration reset to defaults.")


@app.command("path")
def config_path():
    """Show the path of the configuration file."""
    console.print(str(CONFIG_PATH))
