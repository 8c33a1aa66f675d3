"""Binding live paths to template files with symlinks."""

import logging
import os
import stat
from pathlib import Path
from typing import Optional

from .config import TrackingList
from .fileops import DIFF_UNAVAILABLE, backup_file, file_diff, relink
from .prompt import TerminalPrompt
from .types import ApplyOptions, BindingState, LinkOutcome, LinkResult

logger = logging.getLogger(__name__)


def classify(live: Path, template: Path) -> BindingState:
    """Classify how ``live`` relates to ``template``.

    A symlink only counts as correct when its stored target is exactly
    the template path.
    """
    live = Path(live)
    if not os.path.lexists(live):
        return BindingState.ABSENT
    if live.is_symlink():
        if os.readlink(live) == str(template):
            return BindingState.LINKED_CORRECT
        return BindingState.LINKED_STALE
    return BindingState.FOREIGN


def register(tracking: Optional[TrackingList], live: Path, home: Path):
    """Add the home-relative form of ``live`` to the tracking list."""
    if tracking is None:
        return
    try:
        tracking.add(Path(live).relative_to(home).as_posix())
    except ValueError:
        tracking.add(str(live))


def ensure_directory(template_dir: Path, live_dir: Path) -> bool:
    """Create ``live_dir`` with the permission bits of ``template_dir``.

    Returns True if the directory was created. An existing directory is
    left alone; an existing non-directory raises ``FileExistsError``.
    """
    live_dir = Path(live_dir)
    if live_dir.is_dir():
        return False
    mode = stat.S_IMODE(Path(template_dir).stat().st_mode)
    live_dir.mkdir(parents=True, exist_ok=True)
    os.chmod(live_dir, mode)
    logger.debug(f"Created directory {live_dir}")
    return True


def reconcile(
    template: Path,
    live: Path,
    options: ApplyOptions,
    tracking: Optional[TrackingList],
    home: Path,
    prompt=None,
) -> LinkResult:
    """Make ``live`` a symlink to ``template``.

    Missing live paths are linked directly and correct links are left
    untouched. Anything else is replaced: after showing the diff and
    asking (when ``options.diff_prompt``), and after a backup (when
    ``options.backup``). Declining the prompt is not an error. Without a
    ``prompt`` the terminal is asked.

    Raises:
        OSError: on filesystem failures; the entry is left as it was
            found unless the failure happened after the backup.
    """
    template = Path(template)
    live = Path(live)
    state = classify(live, template)

    if state is BindingState.LINKED_CORRECT:
        logger.debug(f"Symlink already exists: {live} -> {template}")
        return LinkResult(LinkOutcome.UNCHANGED)

    if state is BindingState.ABSENT:
        live.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(str(template), str(live))
        logger.debug(f"Created symlink: {live} -> {template}")
        register(tracking, live, home)
        return LinkResult(LinkOutcome.LINKED)

    if options.diff_prompt and not _confirm_replace(template, live, prompt):
        logger.info(f"Skipping {live}")
        return LinkResult(LinkOutcome.SKIPPED)

    backup = None
    if options.backup:
        backup = backup_file(live)
        if backup:
            logger.info(f"Backed up {live} to {backup}")

    relink(template, live)
    register(tracking, live, home)
    return LinkResult(LinkOutcome.REPLACED, backup)


def _confirm_replace(template: Path, live: Path, prompt) -> bool:
    if prompt is None:
        prompt = TerminalPrompt()
    if not live.exists():
        # Dangling symlink, nothing to compare
        return True
    if live.is_dir():
        diff = f"{DIFF_UNAVAILABLE}: {live} is a directory"
    else:
        try:
            diff = file_diff(live, template)
        except OSError as e:
            logger.warning(f"Failed to get diff for {live}: {e}")
            diff = DIFF_UNAVAILABLE
    prompt.echo(f"Diff for {live}:\n{diff}")
    return prompt.confirm(f"Apply changes to {live}?")
