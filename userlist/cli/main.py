"""Main CLI entry point for userlist."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from userlist.cli.commands.browse import browse_users
from userlist.cli.commands.list import list_users
from userlist.config import load_config
from userlist.exceptions import ConfigurationError

console = Console(stderr=True)

app = typer.Typer(
    name="userlist",
    help="userlist - Browse a remote users list page by page",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """
    userlist CLI
    """
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Commands read the settings loaded here instead of reloading them.
    ctx.obj = config


app.command("list", help="Fetch the users list and print one page")(list_users)
app.command("browse", help="Browse the users list in an interactive screen")(browse_users)


if __name__ == "__main__":
    app()
