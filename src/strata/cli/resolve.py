"""Resolve and conflicts commands for strata CLI."""

from typing import Optional

import typer

from ..errors import StrataError
from .helpers import (
    commit_templates,
    error,
    get_config,
    get_manager,
    logger,
    parse_strategy,
    print_resolve_report,
    require_initialized,
)


def register(app: typer.Typer) -> None:
    """Register conflict commands with the app."""
    app.command()(resolve)
    app.command()(conflicts)


def resolve(
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="interactive, keep-local, keep-remote, merge or backup-both",
    ),
    no_commit: bool = typer.Option(
        False, "--no-commit", help="Do not commit the template directory"
    ),
):
    """Resolve live files that differ from their templates.

    Without --strategy the configured default (conflicts.strategy) is used.
    Unknown strategy names fall back to interactive.
    """
    config = get_config()
    template_dir = require_initialized(config)
    manager = get_manager(config)

    chosen = parse_strategy(strategy or config.get("conflicts.strategy"))
    logger.info(f"Resolving conflicts with strategy: {chosen.value}")
    try:
        report = manager.resolve_conflicts(chosen)
    except (StrataError, OSError) as e:
        error(str(e))
        raise typer.Exit(1)

    print_resolve_report(report)

    if not no_commit and report.resolved:
        commit_templates(template_dir, "Resolved conflicts via strata")

    if not report.success:
        raise typer.Exit(1)


def conflicts(
    show_diff: bool = typer.Option(
        False, "--diff", help="Show the line diff for each conflict"
    ),
):
    """List live files that differ from their templates."""
    config = get_config()
    require_initialized(config)
    manager = get_manager(config)

    records = manager.detect_conflicts()
    if not records:
        typer.echo("✓ No conflicts found.")
        return

    typer.echo(f"Found {len(records)} conflict(s):")
    for record in records:
        typer.echo(
            f"  {record.live_path} ({record.state.value}) -> "
            f"{record.template_path}"
        )
        if show_diff:
            for line in record.diff.splitlines():
                typer.echo(f"      {line}")
    typer.echo("\nTo resolve them, run: strata resolve")
