"""File primitives: copies, timestamped backups, symlink replacement, diffs."""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TOOL_MARKER = "strata"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
DIFF_UNAVAILABLE = "Unable to generate diff"
FILES_IDENTICAL = "Files are identical"


def timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def _unused(path: Path) -> Path:
    """Return ``path``, or ``path.N`` for the first N not already taken."""
    if not os.path.lexists(path):
        return path
    n = 1
    while os.path.lexists(f"{path}.{n}"):
        n += 1
    return Path(f"{path}.{n}")


def backup_path(path: Path, now: Optional[datetime] = None) -> Path:
    """Name for a backup of ``path``: ``<path>.strata.bak.<timestamp>``."""
    path = Path(path)
    return _unused(
        path.with_name(f"{path.name}.{TOOL_MARKER}.bak.{timestamp(now)}")
    )


def local_copy_path(template: Path, now: Optional[datetime] = None) -> Path:
    """Name for a local copy kept next to a template file."""
    template = Path(template)
    return _unused(
        template.with_name(f"{template.name}.local.{timestamp(now)}")
    )


def copy_file(source: Path, destination: Path, mode: Optional[int] = None):
    """Copy file contents, following symlinks on the source side.

    The destination's parent directories are created as needed. When
    ``mode`` is given the destination gets those permission bits.
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(str(source), str(destination))
    if mode is not None:
        os.chmod(destination, mode & 0o7777)


def backup_file(path: Path) -> Optional[Path]:
    """Copy what ``path`` points at to a timestamped backup beside it.

    Returns the backup path, or None when there is nothing to back up
    (missing path or dangling symlink).
    """
    path = Path(path)
    if not path.exists():
        return None

    target = backup_path(path)
    if path.is_dir():
        shutil.copytree(str(path), str(target), symlinks=True)
    else:
        shutil.copy2(str(path), str(target))
    logger.debug(f"Backed up {path} to {target}")
    return target


def move_to_backup(path: Path) -> Path:
    """Rename ``path`` (file or symlink) to a timestamped backup name."""
    path = Path(path)
    target = backup_path(path)
    os.rename(path, target)
    logger.debug(f"Moved {path} to {target}")
    return target


def remove_path(path: Path):
    """Remove a file, symlink or directory tree. Missing paths are ignored."""
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def relink(template: Path, live: Path):
    """Make ``live`` a symlink to ``template``, replacing whatever is there."""
    live = Path(live)
    remove_path(live)
    live.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(str(template), str(live))
    logger.debug(f"Linked {live} -> {template}")


def file_diff(first: Path, second: Path) -> str:
    """Compare two files line by line, position by position.

    Lines are paired by index, not aligned: a changed line is shown as
    ``- old`` followed by ``+ new``; surplus lines in either file appear as
    a single ``-`` or ``+`` line.

    Raises:
        OSError: if either file cannot be read.
    """
    lines1 = Path(first).read_text(errors="replace").split("\n")
    lines2 = Path(second).read_text(errors="replace").split("\n")

    out = []
    for i in range(max(len(lines1), len(lines2))):
        if i >= len(lines1):
            out.append(f"+ {lines2[i]}\n")
        elif i >= len(lines2):
            out.append(f"- {lines1[i]}\n")
        elif lines1[i] != lines2[i]:
            out.append(f"- {lines1[i]}\n+ {lines2[i]}\n")

    if not out:
        return FILES_IDENTICAL
    return "".join(out)


def safe_diff(live: Path, template: Path) -> str:
    """``file_diff`` that degrades to a placeholder instead of raising."""
    try:
        return file_diff(live, template)
    except OSError as e:
        logger.warning(f"Failed to get diff for {live}: {e}")
        return DIFF_UNAVAILABLE
