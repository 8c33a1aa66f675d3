"""Shared helper functions for CLI commands."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

import typer

from ..config import Config, TrackingList, get_config_path
from ..errors import NotInitializedError, UnknownStrategyError
from ..manager import LayerManager
from ..repo import TemplateRepo
from ..system import Environment
from ..types import ApplyReport, ResolveReport, Strategy

# Global environment instance
env = Environment()
logger = logging.getLogger(__name__)

# Set from the global --config option
config_override: Optional[Path] = None


def error(message: str):
    typer.echo(f"Error: {message}", err=True)


def config_path() -> Path:
    """The --config file if one was given, else ~/.strata.yaml or ~/.strata.yml."""
    if config_override is not None:
        return config_override
    return get_config_path(env.home)


def get_config() -> Config:
    return Config(config_path(), env=env)


def get_manager(config: Config, prompt=None) -> LayerManager:
    """Create a LayerManager for the configured template directory."""
    return LayerManager(
        config.get_template_dir(),
        env.home,
        config.get_environment(),
        env.hostname,
        tracking=TrackingList.from_config(config),
        prompt=prompt,
    )


def require_initialized(config: Config) -> Path:
    """Ensure the template directory exists.

    Raises:
        typer.Exit(1): If the template directory is missing.
    """
    template_dir = config.get_template_dir()
    if not template_dir.is_dir():
        error(str(NotInitializedError(template_dir)))
        raise typer.Exit(1)
    return template_dir


def save_tracking(manager: LayerManager, config: Config):
    """Write newly tracked paths back to the config file."""
    if manager.tracking.persist(config, config_path()):
        logger.debug(f"Saved {len(manager.tracking)} tracked path(s)")


def get_subprocess_error(e: subprocess.SubprocessError) -> str:
    """Extract error message from a failed or timed out git call.

    Handles both string and bytes stderr, returning a clean string.
    """
    stderr = getattr(e, "stderr", "") or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip() or str(e)


def commit_templates(template_dir: Path, message: str) -> bool:
    """Commit changes in the template directory if it is a git repository."""
    repo = TemplateRepo(template_dir)
    if not repo.is_repo():
        logger.debug(f"{template_dir} is not a git repository, not committing")
        return False
    try:
        return repo.commit_changes(message)
    except subprocess.SubprocessError as e:
        logger.warning(f"Failed to commit changes: {get_subprocess_error(e)}")
        return False


def parse_strategy(name: Optional[str]) -> Strategy:
    """Strategy for a command-line name; unknown names mean interactive."""
    try:
        return Strategy.parse(name or Strategy.INTERACTIVE.value)
    except UnknownStrategyError:
        logger.warning(f"Unknown conflict strategy: {name}, using interactive")
        return Strategy.INTERACTIVE


def print_apply_report(report: ApplyReport):
    typer.echo(
        f"✓ {len(report.linked)} linked, {len(report.replaced)} replaced, "
        f"{len(report.unchanged)} unchanged, {len(report.skipped)} skipped"
    )
    for backup in report.backups:
        typer.echo(f"  backup: {backup}")
    for path, reason in report.failed:
        typer.echo(f"✗ {path}: {reason}", err=True)


def print_resolve_report(report: ResolveReport):
    for path, resolution in report.resolved:
        typer.echo(f"  {path}: {resolution.value}")
    for path, reason in report.failed:
        typer.echo(f"✗ {path}: {reason}", err=True)
    if not report.resolved and not report.failed:
        typer.echo("✓ No conflicts found.")
