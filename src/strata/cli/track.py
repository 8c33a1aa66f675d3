"""Track command for strata CLI."""

from pathlib import Path
from typing import List, Optional

import typer

from ..errors import StrataError
from .helpers import (
    commit_templates,
    error,
    get_config,
    get_manager,
    logger,
    require_initialized,
    save_tracking,
)


def register(app: typer.Typer) -> None:
    """Register the track command with the app."""
    app.command()(track)


def track(
    paths: List[Path] = typer.Argument(..., help="Files or directories to track"),
    dest: Optional[str] = typer.Option(
        None,
        "--dest",
        "-d",
        help="Destination inside the template directory (single path only)",
    ),
    tier: Optional[str] = typer.Option(
        None,
        "--env",
        "-e",
        help="Tier to track into: common, machine, or an environment name",
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace existing template files"
    ),
    no_commit: bool = typer.Option(
        False, "--no-commit", help="Do not commit the template directory"
    ),
):
    """Copy files into the templates and replace them with symlinks.

    Examples:
        strata track ~/.zshrc
        strata track ~/.config/nvim --env work
    """
    config = get_config()
    template_dir = require_initialized(config)

    if dest and len(paths) > 1:
        error("--dest can only be used with a single path")
        raise typer.Exit(1)

    manager = get_manager(config)
    failures = 0
    for path in paths:
        try:
            destination = manager.track(
                path, destination=dest, tier=tier, overwrite=overwrite
            )
        except (StrataError, OSError) as e:
            logger.error(f"Failed to track {path}: {e}")
            failures += 1
            continue
        typer.echo(f"✓ Tracking {path} -> {destination}")

    save_tracking(manager, config)

    if not no_commit:
        commit_templates(template_dir, "Added tracked files via strata")

    if failures:
        raise typer.Exit(1)
