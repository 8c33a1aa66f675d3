"""Apply and sync commands for strata CLI."""

import subprocess
from typing import Optional

import typer

from ..errors import StrataError
from ..repo import TemplateRepo
from .helpers import (
    error,
    get_config,
    get_manager,
    get_subprocess_error,
    logger,
    parse_strategy,
    print_apply_report,
    print_resolve_report,
    require_initialized,
    save_tracking,
)


def register(app: typer.Typer) -> None:
    """Register apply and sync commands with the app."""
    app.command()(apply)
    app.command()(sync)


def _run_apply(manager, config, no_backup: bool, no_diff_prompt: bool):
    backup = config.get_option("backup_before_overwrite") and not no_backup
    diff_prompt = config.get_option("prompt_on_diff") and not no_diff_prompt
    try:
        report = manager.apply(backup=backup, diff_prompt=diff_prompt)
    except (StrataError, OSError) as e:
        error(f"Failed to apply templates: {e}")
        raise typer.Exit(1)
    finally:
        save_tracking(manager, config)
    print_apply_report(report)
    return report


def _dry_run(
    manager,
    repo: TemplateRepo,
    is_repo: bool,
    no_pull: bool,
    no_push: bool,
    resolve_conflicts: bool,
):
    """Report what sync would do without touching anything."""
    if is_repo and repo.has_uncommitted_changes():
        typer.echo("[DRY RUN] Would commit local changes")
    if is_repo and not no_pull and repo.has_remote():
        typer.echo("[DRY RUN] Would pull changes from remote")
    conflicts = manager.detect_conflicts()
    if resolve_conflicts and conflicts:
        typer.echo(f"[DRY RUN] Would resolve {len(conflicts)} conflict(s)")
    for record in conflicts:
        typer.echo(f"  {record.live_path}")
    typer.echo("[DRY RUN] Would apply configurations")
    if is_repo and not no_push and repo.has_remote():
        typer.echo("[DRY RUN] Would push changes to remote")


def apply(
    no_backup: bool = typer.Option(
        False, "--no-backup", help="Do not back up files before replacing them"
    ),
    no_diff_prompt: bool = typer.Option(
        False, "--no-diff-prompt", help="Replace files without showing a diff"
    ),
):
    """Link common, environment and machine templates into your home."""
    config = get_config()
    require_initialized(config)
    manager = get_manager(config)

    report = _run_apply(manager, config, no_backup, no_diff_prompt)
    if not report.success:
        raise typer.Exit(1)


def sync(
    no_pull: bool = typer.Option(
        False, "--no-pull", help="Skip pulling changes from remote"
    ),
    no_push: bool = typer.Option(
        False, "--no-push", help="Skip pushing changes to remote"
    ),
    no_backup: bool = typer.Option(
        False, "--no-backup", help="Do not back up files before replacing them"
    ),
    no_diff_prompt: bool = typer.Option(
        False, "--no-diff-prompt", help="Replace files without showing a diff"
    ),
    resolve_conflicts: bool = typer.Option(
        False, "--resolve-conflicts", help="Resolve conflicts before applying"
    ),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="interactive, keep-local, keep-remote, merge or backup-both",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be done without making changes"
    ),
):
    """Commit, pull, apply and push the template repository.

    Examples:
        strata sync
        strata sync --no-push
        strata sync --resolve-conflicts --strategy keep-remote
        strata sync --dry-run
    """
    config = get_config()
    template_dir = require_initialized(config)
    manager = get_manager(config)
    repo = TemplateRepo(template_dir)
    is_repo = repo.is_repo()

    typer.echo("\n--- strata Sync ---")
    if not is_repo:
        logger.warning(
            f"{template_dir} is not a git repository, skipping pull and push"
        )

    if dry_run:
        try:
            _dry_run(manager, repo, is_repo, no_pull, no_push, resolve_conflicts)
        except subprocess.SubprocessError as e:
            error(f"Failed to inspect template repository: {get_subprocess_error(e)}")
            raise typer.Exit(1)
        typer.echo("\n--- Dry Run Complete ---\n")
        return

    try:
        if is_repo and repo.has_uncommitted_changes():
            logger.info("Uncommitted changes detected, committing...")
            repo.commit_changes("Auto-commit before sync")
        if is_repo and not no_pull:
            if repo.has_remote():
                repo.pull()
            else:
                logger.info("No remote configured, skipping pull")
    except subprocess.SubprocessError as e:
        error(f"Failed to update template repository: {get_subprocess_error(e)}")
        raise typer.Exit(1)

    if resolve_conflicts:
        chosen = parse_strategy(strategy or config.get("conflicts.strategy"))
        logger.info(f"Resolving conflicts with strategy: {chosen.value}")
        try:
            resolution = manager.resolve_conflicts(chosen)
        except (StrataError, OSError) as e:
            error(str(e))
            raise typer.Exit(1)
        print_resolve_report(resolution)
        if not resolution.success:
            raise typer.Exit(1)

    report = _run_apply(manager, config, no_backup, no_diff_prompt)

    if is_repo and not no_push:
        try:
            repo.commit_changes("Update templates via strata sync")
            if repo.has_remote():
                repo.push()
            else:
                logger.info("No remote configured, skipping push")
        except subprocess.SubprocessError as e:
            error(f"Failed to push changes: {get_subprocess_error(e)}")
            raise typer.Exit(1)

    typer.echo("\n--- Sync Complete! ---\n")
    if not report.success:
        raise typer.Exit(1)
