"""Shared result and record types."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import UnknownStrategyError


class BindingState(str, Enum):
    """How a live path relates to its template entry."""

    ABSENT = "absent"
    LINKED_CORRECT = "linked-correct"
    LINKED_STALE = "linked-stale"
    FOREIGN = "foreign"

    @property
    def is_conflict(self) -> bool:
        return self in (BindingState.LINKED_STALE, BindingState.FOREIGN)


class LinkOutcome(str, Enum):
    """What reconciling one entry did to the live tree."""

    LINKED = "linked"
    REPLACED = "replaced"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


class Strategy(str, Enum):
    """Conflict resolution strategies."""

    INTERACTIVE = "interactive"
    KEEP_LOCAL = "keep-local"
    KEEP_REMOTE = "keep-remote"
    MERGE = "merge"
    BACKUP_BOTH = "backup-both"

    @classmethod
    def parse(cls, name) -> "Strategy":
        """Return the strategy called ``name``.

        Raises:
            UnknownStrategyError: if ``name`` is not a strategy.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnknownStrategyError(str(name)) from None

    @classmethod
    def names(cls) -> List[str]:
        return [s.value for s in cls]


class Resolution(str, Enum):
    """Outcome of resolving a single conflict."""

    KEPT_LOCAL = "kept-local"
    KEPT_REMOTE = "kept-remote"
    MERGED = "merged"
    BACKED_UP_BOTH = "backed-up-both"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ApplyOptions:
    backup: bool = True
    diff_prompt: bool = True


@dataclass(frozen=True)
class LinkResult:
    outcome: LinkOutcome
    backup: Optional[Path] = None


@dataclass(frozen=True)
class ConflictRecord:
    """A live path that is not linked to its template.

    Attributes:
        live_path: Path inside the home directory.
        template_path: The template file the live path should link to.
        diff: Positional line diff, live first, template second.
        state: ``FOREIGN`` or ``LINKED_STALE``.
    """

    live_path: Path
    template_path: Path
    diff: str
    state: BindingState = BindingState.FOREIGN


@dataclass
class ApplyReport:
    """Summary of one layered application run."""

    linked: List[Path] = field(default_factory=list)
    replaced: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    backups: List[Path] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def mutations(self) -> int:
        """Number of live paths that were created or replaced."""
        return len(self.linked) + len(self.replaced)

    @property
    def success(self) -> bool:
        return not self.failed

    def record(self, live: Path, outcome: LinkOutcome):
        {
            LinkOutcome.LINKED: self.linked,
            LinkOutcome.REPLACED: self.replaced,
            LinkOutcome.UNCHANGED: self.unchanged,
            LinkOutcome.SKIPPED: self.skipped,
        }[outcome].append(live)


@dataclass
class ResolveReport:
    """Summary of resolving a batch of conflicts."""

    resolved: List[Tuple[Path, Resolution]] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def skipped(self) -> List[Path]:
        return [p for p, r in self.resolved if r is Resolution.SKIPPED]

    @property
    def success(self) -> bool:
        return not self.failed
