"""Layered application: link every tier of the template tree into home."""

import logging
from pathlib import Path
from typing import Optional

from .config import TrackingList
from .links import ensure_directory, reconcile
from .tiers import plan_layers
from .types import ApplyOptions, ApplyReport

logger = logging.getLogger(__name__)


def apply_layers(
    template_root: Path,
    environment: Optional[str],
    hostname: str,
    home: Path,
    options: ApplyOptions = ApplyOptions(),
    tracking: Optional[TrackingList] = None,
    prompt=None,
) -> ApplyReport:
    """Apply common, environment and machine tiers, in that order.

    When two tiers provide the same live path the later one wins: the
    live path ends up linked to the most specific template, and a link
    left behind by a less specific tier is treated as stale and replaced.
    Running this twice without changes in between mutates nothing the
    second time.

    Missing tier directories are skipped. Per-entry failures are logged
    and collected in the report; the walk continues with the next entry.
    """
    template_root = Path(template_root)
    home = Path(home)
    report = ApplyReport()

    plan = plan_layers(template_root, environment, hostname, home)

    for live, entry in plan.directories.items():
        try:
            ensure_directory(entry.path, live)
        except OSError as e:
            logger.error(f"Failed to create directory {live}: {e}")
            report.failed.append((live, str(e)))

    for live, entry in plan.files.items():
        try:
            result = reconcile(
                entry.path, live, options, tracking, home, prompt
            )
        except OSError as e:
            logger.error(f"Failed to apply {entry.path} to {live}: {e}")
            report.failed.append((live, str(e)))
            continue

        report.record(live, result.outcome)
        if result.backup:
            report.backups.append(result.backup)

    logger.info(
        f"Applied templates: {len(report.linked)} linked, "
        f"{len(report.replaced)} replaced, {len(report.unchanged)} unchanged, "
        f"{len(report.skipped)} skipped, {len(report.failed)} failed"
    )
    return report
