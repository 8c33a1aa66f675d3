"""strata CLI - command-line interface for layered dotfiles."""

from pathlib import Path
from typing import Optional

import typer

from ..utils import get_version, setup_logging
from . import apply, helpers, init, resolve, status, track

# Create the main app
app = typer.Typer(
    name="strata",
    help="Layered dotfiles: common, environment and machine templates.",
    add_completion=True,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging output.",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file to use instead of ~/.strata.yaml.",
    ),
):
    """strata - link layered dotfile templates into your home directory."""
    setup_logging(verbose=verbose)
    helpers.config_override = config.expanduser() if config else None


# Register all commands
init.register(app)
track.register(app)
apply.register(app)
resolve.register(app)
status.register(app)


@app.command()
def version():
    """Show the version of strata."""
    typer.echo(f"strata version {get_version()}")


def main():
    """Main entry point for the strata CLI."""
    app()
