"""Exceptions raised by strata.

Filesystem failures are not wrapped: they surface as the built-in
``OSError`` family so callers can tell a permission problem from a
policy refusal.
"""

from pathlib import Path
from typing import Optional


class StrataError(Exception):
    """Base class for all strata errors."""


class MappingError(StrataError):
    """A template path cannot be mapped to a live path (or back)."""

    def __init__(self, path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot map {path}: {reason}")


class AlreadyTrackedError(StrataError):
    """The template destination exists and overwrite was not requested."""

    def __init__(self, destination: Path):
        self.destination = Path(destination)
        super().__init__(f"Destination already exists: {destination}")


class UnknownStrategyError(StrataError):
    """An unrecognised conflict resolution strategy name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown conflict resolution strategy: {name}")


class NoMergeToolError(StrataError):
    """No supported external merge tool is installed."""

    def __init__(self, candidates):
        self.candidates = list(candidates)
        super().__init__(
            "No merge tool found, please install one of: "
            + ", ".join(self.candidates)
        )


class ExternalToolError(StrataError):
    """An external diff, merge or editor process could not be used."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class NotInitializedError(StrataError):
    """The template directory does not exist yet."""

    def __init__(self, template_root: Path):
        self.template_root = Path(template_root)
        super().__init__(
            f"Template directory not found: {template_root}. "
            "Run 'strata init' first."
        )
