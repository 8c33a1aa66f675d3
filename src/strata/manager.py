"""Facade tying the layering engines to one template directory."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .apply import apply_layers
from .config import TrackingList
from .conflicts import ConflictResolver, binding_states, scan
from .prompt import TerminalPrompt
from .tiers import Tier
from .tools import ExternalTools
from .track import default_destination, track_path
from .types import ApplyOptions, ApplyReport, ConflictRecord, ResolveReport, Strategy

logger = logging.getLogger(__name__)


def absolute(path) -> Path:
    """Absolute form of ``path`` with ``~`` expanded, symlinks kept.

    Links are compared by their stored target string, so template paths
    must be spelled the same way on every run.
    """
    return Path(os.path.abspath(os.path.expanduser(str(path))))


class LayerManager:
    """Applies, tracks and reconciles one template directory.

    Args:
        template_root: Directory holding the ``common``, ``envs`` and
            ``machine`` tiers.
        home: Directory live paths are relative to.
        environment: Active environment name, or None for no environment
            tier.
        hostname: Selects the machine tier.
        tracking: List that receives every live path the engines link.
        prompt: Terminal used for diff confirmation and interactive
            resolution.
        tools: Locator and launcher for merge, diff and editor programs.
    """

    def __init__(
        self,
        template_root: Path,
        home: Path,
        environment: Optional[str],
        hostname: str,
        tracking: Optional[TrackingList] = None,
        prompt=None,
        tools=None,
    ):
        self.template_root = absolute(template_root)
        self.home = absolute(home)
        self.environment = environment
        self.hostname = hostname
        self.tracking = tracking if tracking is not None else TrackingList()
        self.prompt = prompt or TerminalPrompt()
        self.tools = tools or ExternalTools()
        self.resolver = ConflictResolver(self.prompt, self.tools)

    def apply(self, backup: bool = True, diff_prompt: bool = True) -> ApplyReport:
        options = ApplyOptions(backup=backup, diff_prompt=diff_prompt)
        return apply_layers(
            self.template_root,
            self.environment,
            self.hostname,
            self.home,
            options=options,
            tracking=self.tracking,
            prompt=self.prompt,
        )

    def default_tier(self) -> Tier:
        if self.environment:
            return Tier.environment(self.environment)
        return Tier.common()

    def track(
        self,
        source,
        destination=None,
        tier: Union[Tier, str, None] = None,
        overwrite: bool = False,
    ) -> Path:
        """Track ``source``, into ``tier`` unless ``destination`` is given.

        A relative ``destination`` is taken relative to the template root.
        ``tier`` may be a Tier or one of ``common``, ``machine`` or an
        environment name; it defaults to the active environment.
        """
        source = absolute(source)
        if destination is not None:
            destination = Path(os.path.expanduser(str(destination)))
            if not destination.is_absolute():
                destination = self.template_root / destination
            destination = absolute(destination)
        else:
            if tier is None:
                tier = self.default_tier()
            elif isinstance(tier, str):
                tier = Tier.from_option(tier, self.hostname)
            destination = default_destination(
                source, self.template_root, tier, self.home
            )

        return track_path(
            source,
            destination,
            self.template_root,
            overwrite=overwrite,
            tracking=self.tracking,
            home=self.home,
        )

    def detect_conflicts(self) -> List[ConflictRecord]:
        return scan(
            self.template_root, self.environment, self.hostname, self.home
        )

    def resolve_conflicts(self, strategy) -> ResolveReport:
        """Scan for conflicts and resolve them all with ``strategy``.

        Raises:
            UnknownStrategyError: before anything is scanned or changed.
        """
        strategy = Strategy.parse(strategy)
        records = self.detect_conflicts()
        if not records:
            logger.info("No conflicts found")
            return ResolveReport()
        logger.info(f"Found {len(records)} conflict(s)")
        return self.resolver.resolve_all(records, strategy)

    def status(self) -> Dict[str, Any]:
        """Binding state of every tracked path.

        Tracked paths that no tier provides any more are reported with
        state None.
        """
        states = {
            live: (entry, state)
            for live, entry, state in binding_states(
                self.template_root, self.environment, self.hostname, self.home
            )
        }

        tracked = []
        for path in self.tracking:
            live = Path(path)
            if not live.is_absolute():
                live = self.home / live
            entry, state = states.get(live, (None, None))
            tracked.append(
                {
                    "path": path,
                    "template": entry.path if entry else None,
                    "tier": str(entry.tier) if entry else None,
                    "state": state,
                }
            )

        return {
            "template_root": self.template_root,
            "environment": self.environment,
            "hostname": self.hostname,
            "initialized": self.template_root.is_dir(),
            "templates": len(states),
            "conflicts": sum(1 for _, s in states.values() if s.is_conflict),
            "tracked": tracked,
        }
