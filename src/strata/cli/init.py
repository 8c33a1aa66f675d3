"""Init command for strata CLI."""

import shutil
import subprocess
from typing import Optional

import typer

from ..errors import StrataError
from ..repo import TemplateRepo
from . import helpers
from .helpers import error, get_config, get_manager, logger, save_tracking


def register(app: typer.Typer) -> None:
    """Register the init command with the app."""
    app.command()(init)


def init(
    remote: Optional[str] = typer.Option(
        None, "--remote", "-r", help="URL of the template repository to clone"
    ),
    environment: str = typer.Option(
        "default", "--env", "-e", help="Environment to use (e.g. work, home)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Reinitialize an existing template directory"
    ),
):
    """Set up the template directory and link it into your home.

    Clones --remote when given. If there is no remote, or it cannot be
    cloned, a new repository with empty common, environment and machine
    tiers is created instead.
    """
    config = get_config()
    template_dir = config.get_template_dir()

    if template_dir.exists():
        if not force:
            error(
                f"Template directory already exists at {template_dir}. "
                "Use --force to reinitialize."
            )
            raise typer.Exit(1)
        logger.info(f"Removing existing template directory {template_dir}")
        shutil.rmtree(template_dir)

    typer.echo("--- strata Initialization ---\n")

    try:
        if remote:
            try:
                TemplateRepo.clone(remote, template_dir)
                typer.echo(f"✓ Cloned {remote}")
            except subprocess.CalledProcessError as e:
                logger.warning(
                    f"Could not clone {remote}: {helpers.get_subprocess_error(e)}"
                )
                typer.echo("Creating a new template repository instead")
                TemplateRepo.init(
                    template_dir, helpers.env.hostname, environment, remote
                )
        else:
            TemplateRepo.init(template_dir, helpers.env.hostname, environment)
    except (subprocess.SubprocessError, OSError) as e:
        error(f"Failed to initialize repository: {e}")
        raise typer.Exit(1)

    config.set("environment", environment)
    config.set("remote", remote)
    config.save(helpers.config_path())
    logger.info(f"Saved configuration to {config.path}")

    manager = get_manager(config)
    try:
        report = manager.apply(
            backup=config.get_option("backup_before_overwrite"),
            diff_prompt=config.get_option("prompt_on_diff"),
        )
    except (StrataError, OSError) as e:
        error(str(e))
        raise typer.Exit(1)
    finally:
        save_tracking(manager, config)

    helpers.print_apply_report(report)
    typer.echo("\n✓ strata initialized!")
    if not report.success:
        raise typer.Exit(1)
