"""Template tiers and the mapping between template and live paths.

A template directory is split into three tiers, applied in this order:

    <template_root>/common/...
    <template_root>/envs/<environment>/...
    <template_root>/machine/<hostname>/...

Stripping a tier's leading segments from a template path gives the path
relative to the home directory.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import MappingError

logger = logging.getLogger(__name__)

README_NAME = "README.md"
GIT_PREFIX = ".git"


class TierKind(Enum):
    COMMON = "common"
    ENVIRONMENT = "envs"
    MACHINE = "machine"


@dataclass(frozen=True)
class Tier:
    """One precedence level of the template tree."""

    kind: TierKind
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind is TierKind.COMMON:
            if self.name is not None:
                raise ValueError("The common tier has no name")
        elif not self.name:
            raise ValueError(f"The {self.kind.value} tier needs a name")

    @classmethod
    def common(cls) -> "Tier":
        return cls(TierKind.COMMON)

    @classmethod
    def environment(cls, name: str) -> "Tier":
        return cls(TierKind.ENVIRONMENT, name)

    @classmethod
    def machine(cls, hostname: str) -> "Tier":
        return cls(TierKind.MACHINE, hostname)

    @classmethod
    def from_option(cls, value: str, hostname: str) -> "Tier":
        """Build a tier from a command-line style name.

        ``common`` and ``machine`` select those tiers; anything else is
        taken as an environment name.
        """
        if value == TierKind.COMMON.value:
            return cls.common()
        if value == TierKind.MACHINE.value:
            return cls.machine(hostname)
        return cls.environment(value)

    @property
    def segments(self) -> Tuple[str, ...]:
        """Leading path segments of this tier inside the template root."""
        if self.kind is TierKind.COMMON:
            return (self.kind.value,)
        return (self.kind.value, self.name)

    def root(self, template_root: Path) -> Path:
        return Path(template_root).joinpath(*self.segments)

    def __str__(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True)
class TemplateEntry:
    """A file or directory inside one tier of the template tree."""

    tier: Tier
    path: Path
    relative: Path
    is_dir: bool = False

    def live_path(self, home: Path) -> Path:
        return to_live(self.tier, self.relative, home)


def tier_order(environment: Optional[str], hostname: str) -> List[Tier]:
    """Tiers in application order; later tiers override earlier ones."""
    tiers = [Tier.common()]
    if environment:
        tiers.append(Tier.environment(environment))
    tiers.append(Tier.machine(hostname))
    return tiers


def to_live(tier: Tier, relative, home: Path) -> Path:
    """Map a template-root-relative path to its live path under ``home``.

    Raises:
        MappingError: if ``relative`` is not strictly inside ``tier``.
    """
    parts = Path(relative).parts
    count = len(tier.segments)
    if len(parts) <= count:
        raise MappingError(relative, f"too short for tier {tier}")
    if tuple(parts[:count]) != tier.segments:
        raise MappingError(relative, f"not inside tier {tier}")
    return Path(home).joinpath(*parts[count:])


def to_template(tier: Tier, live, home: Path) -> Path:
    """Map a live path (absolute or home-relative) to its template path.

    The result is relative to the template root.
    """
    live = Path(live)
    if live.is_absolute():
        try:
            live = live.relative_to(home)
        except ValueError:
            raise MappingError(live, f"not under home directory {home}")
    if not live.parts or live == Path("."):
        raise MappingError(live, "empty path")
    return Path(*tier.segments, live)


def is_reserved(tier_relative: Path) -> bool:
    """Entries that are never linked: ``.git*`` and a tier-root README."""
    text = Path(tier_relative).as_posix()
    return text.startswith(GIT_PREFIX) or text == README_NAME


def iter_tier(template_root: Path, tier: Tier) -> Iterator[TemplateEntry]:
    """Walk a tier root in pre-order, directories before their children.

    A missing tier root yields nothing. Reserved entries and everything
    below them are skipped.
    """
    template_root = Path(template_root)
    root = tier.root(template_root)
    if not root.is_dir():
        logger.debug(f"Tier directory does not exist: {root}")
        return

    def walk(directory: Path) -> Iterator[TemplateEntry]:
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if is_reserved(child.relative_to(root)):
                logger.debug(f"Skipping reserved entry {child}")
                continue
            is_dir = child.is_dir() and not child.is_symlink()
            yield TemplateEntry(
                tier=tier,
                path=child,
                relative=child.relative_to(template_root),
                is_dir=is_dir,
            )
            if is_dir:
                yield from walk(child)

    yield from walk(root)


@dataclass
class LayerPlan:
    """Template entries keyed by the live path they map to.

    ``files`` holds, for every live path, the entry of the highest
    precedence tier that provides it. ``directories`` keeps the first tier
    to provide each live directory, minus any path a file claims.
    """

    directories: Dict[Path, TemplateEntry] = field(default_factory=dict)
    files: Dict[Path, TemplateEntry] = field(default_factory=dict)


def plan_layers(
    template_root: Path,
    environment: Optional[str],
    hostname: str,
    home: Path,
) -> LayerPlan:
    """Walk every tier and decide which template wins each live path.

    Entries that cannot be mapped are skipped with a warning.
    """
    plan = LayerPlan()
    for tier in tier_order(environment, hostname):
        for entry in iter_tier(template_root, tier):
            try:
                live = entry.live_path(home)
            except MappingError as e:
                logger.warning(f"Skipping {entry.path}: {e}")
                continue

            if entry.is_dir:
                plan.directories.setdefault(live, entry)
                continue
            previous = plan.files.get(live)
            if previous is not None:
                logger.debug(f"{previous.path} is overridden by {entry.path}")
            plan.files[live] = entry

    for live in list(plan.directories):
        if live in plan.files:
            del plan.directories[live]
    return plan
