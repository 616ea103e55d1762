"""Main CLI entry point for supa-session."""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from supa_session.cli import utils
from supa_session.cli.commands import auth, config

app = typer.Typer(
    name="supa-session",
    help="Log in, refresh and inspect your backend session",
    no_args_is_help=True,
)

app.command("login")(auth.do_login)
app.command("oauth")(auth.do_oauth)
app.command("oauth-url")(auth.oauth_url)
app.command("oauth-complete")(auth.oauth_complete)
app.command("refresh")(auth.do_refresh)
app.command("logout")(auth.do_logout)
app.command("status")(auth.status)
app.command("profile")(auth.do_profile)

app.add_typer(config.app, name="config", help="Manage configuration")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """Client-side session manager for the authentication backend."""
    utils.state["verbose"] = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        )


if __name__ == "__main__":
    app()
