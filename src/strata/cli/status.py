"""Status command for strata CLI."""

import subprocess

import typer

from ..repo import TemplateRepo
from ..types import BindingState
from . import helpers
from .helpers import get_config, get_manager, get_subprocess_error

STATE_LABELS = {
    BindingState.LINKED_CORRECT: "✓ linked",
    BindingState.LINKED_STALE: "⚠ linked elsewhere",
    BindingState.FOREIGN: "⚠ conflict (not a symlink)",
    BindingState.ABSENT: "✗ missing",
}


def register(app: typer.Typer) -> None:
    """Register the status command with the app."""
    app.command()(status)


def status():
    """Show environment, repository state and tracked files."""
    config = get_config()
    env = helpers.env
    template_dir = config.get_template_dir()

    typer.echo("\n--- strata Status ---")
    typer.echo(f"Environment : {config.get_environment()}")
    typer.echo(f"Hostname    : {env.hostname}")
    typer.echo(
        f"OS          : {env.os_info['pretty_name']} ({env.os_info['machine']})"
    )
    typer.echo(f"User        : {env.user}")
    typer.echo(f"Templates   : {template_dir}")

    if not template_dir.is_dir():
        typer.echo("\n✗ Template directory not found (run 'strata init')")
        raise typer.Exit(1)

    _print_git_status(TemplateRepo(template_dir))

    info = get_manager(config).status()
    typer.echo("\nTracked Files:")
    if not info["tracked"]:
        typer.echo("  No files are currently tracked.")
    for item in info["tracked"]:
        label = STATE_LABELS.get(item["state"], "✗ no template")
        tier = f" [{item['tier']}]" if item["tier"] else ""
        typer.echo(f"  {item['path']} : {label}{tier}")

    if info["conflicts"]:
        typer.echo(
            f"\n⚠ {info['conflicts']} conflict(s). "
            "Run 'strata conflicts' for details."
        )


def _print_git_status(repo: TemplateRepo):
    typer.echo("\nRepository:")
    if not repo.is_repo():
        typer.echo("  ✗ not a git repository")
        return

    try:
        changed = repo.changed_files()
    except subprocess.SubprocessError as e:
        helpers.logger.error(f"Failed to get git status: {get_subprocess_error(e)}")
        return

    if changed:
        typer.echo("  ⚠ uncommitted changes:")
        for path in changed:
            typer.echo(f"    - {path}")
    else:
        typer.echo("  ✓ clean, no uncommitted changes")

    counts = repo.ahead_behind()
    if counts is None:
        return
    ahead, behind = counts
    if behind:
        typer.echo(f"  ↓ behind remote by {behind} commit(s)")
    if ahead:
        typer.echo(f"  ↑ ahead of remote by {ahead} commit(s)")
    if not ahead and not behind:
        typer.echo("  ✓ in sync with remote")
