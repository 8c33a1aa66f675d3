"""Finding live files that have drifted from their templates."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..fileops import safe_diff
from ..links import classify
from ..tiers import TemplateEntry, plan_layers
from ..types import BindingState, ConflictRecord

logger = logging.getLogger(__name__)


def binding_states(
    template_root: Path,
    environment: Optional[str],
    hostname: str,
    home: Path,
) -> List[Tuple[Path, TemplateEntry, BindingState]]:
    """Classify every live path reachable from the template tiers.

    Each live path appears once, paired with the template of the highest
    precedence tier that provides it.
    """
    plan = plan_layers(template_root, environment, hostname, Path(home))
    return [
        (live, entry, classify(live, entry.path))
        for live, entry in plan.files.items()
    ]


def scan(
    template_root: Path,
    environment: Optional[str],
    hostname: str,
    home: Path,
) -> List[ConflictRecord]:
    """Return a record for every foreign or stale live path.

    Read-only. Diffs are best effort: an unreadable file gets a
    placeholder diff instead of failing the scan.
    """
    records = []
    for live, entry, state in binding_states(
        template_root, environment, hostname, home
    ):
        if not state.is_conflict:
            continue
        records.append(
            ConflictRecord(
                live_path=live,
                template_path=entry.path,
                diff=safe_diff(live, entry.path),
                state=state,
            )
        )

    logger.debug(f"Found {len(records)} conflict(s) in {template_root}")
    return records
