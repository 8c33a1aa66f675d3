"""Bringing live files under template control."""

import errno
import logging
import os
import stat
from pathlib import Path
from typing import Optional

from .config import TrackingList
from .errors import AlreadyTrackedError, MappingError
from .fileops import copy_file, move_to_backup
from .links import register
from .tiers import Tier, to_template

logger = logging.getLogger(__name__)


def default_destination(
    source: Path, template_root: Path, tier: Tier, home: Path
) -> Path:
    """Template path for ``source`` inside ``tier``.

    ``~/.config/nvim/init.lua`` tracked into the ``work`` environment goes
    to ``<template_root>/envs/work/.config/nvim/init.lua``.
    """
    return Path(template_root) / to_template(tier, source, home)


def track_path(
    source: Path,
    destination: Path,
    template_root: Path,
    overwrite: bool = False,
    tracking: Optional[TrackingList] = None,
    home: Optional[Path] = None,
) -> Path:
    """Copy ``source`` into the template tree and link it back.

    Files are copied with their permission bits, the original is moved
    aside to a timestamped backup and replaced by a symlink to the copy.
    Directories are mirrored: their structure is created in the template
    tree and every file inside is tracked individually.

    Tracking a file that is already a symlink to ``destination`` does
    nothing beyond registering it again.

    Returns:
        The template path.

    Raises:
        FileNotFoundError: if ``source`` does not exist.
        AlreadyTrackedError: if a template file exists and ``overwrite`` is
            False. Nothing is changed for that file.
        MappingError: if ``destination`` is outside ``template_root`` or
            is ``template_root`` itself.
    """
    source = Path(source)
    destination = Path(destination)
    home = Path(home) if home else Path.home()

    if not source.exists():
        raise FileNotFoundError(
            errno.ENOENT, "Source does not exist", str(source)
        )

    try:
        relative = destination.relative_to(template_root)
    except ValueError:
        raise MappingError(
            destination, f"not inside template directory {template_root}"
        )
    if relative == Path("."):
        raise MappingError(destination, "is the template directory itself")

    if source.is_dir() and not _links_to(source, destination):
        _track_directory(source, destination, overwrite, tracking, home)
    else:
        _track_file(source, destination, overwrite, tracking, home)
    return destination


def _links_to(path: Path, target: Path) -> bool:
    return path.is_symlink() and os.readlink(path) == str(target)


def _track_directory(
    source: Path,
    destination: Path,
    overwrite: bool,
    tracking: Optional[TrackingList],
    home: Path,
):
    if not destination.is_dir():
        destination.mkdir(parents=True, exist_ok=True)
        os.chmod(destination, stat.S_IMODE(source.stat().st_mode))

    for child in sorted(source.iterdir(), key=lambda p: p.name):
        target = destination / child.name
        if not child.exists():
            logger.warning(f"Skipping broken symlink {child}")
            continue
        if child.is_dir() and not child.is_symlink():
            _track_directory(child, target, overwrite, tracking, home)
        else:
            _track_file(child, target, overwrite, tracking, home)


def _track_file(
    source: Path,
    destination: Path,
    overwrite: bool,
    tracking: Optional[TrackingList],
    home: Path,
):
    if _links_to(source, destination):
        logger.debug(f"Symlink already exists: {source} -> {destination}")
        register(tracking, source, home)
        return

    if os.path.lexists(destination) and not overwrite:
        raise AlreadyTrackedError(destination)

    mode = stat.S_IMODE(source.stat().st_mode)
    copy_file(source, destination, mode)

    backup = move_to_backup(source)
    logger.debug(f"Backed up {source} to {backup}")

    os.symlink(str(destination), str(source))
    logger.info(f"Tracking {source} -> {destination}")
    register(tracking, source, home)
