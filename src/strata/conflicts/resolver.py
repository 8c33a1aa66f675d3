"""Resolving conflicts between live files and their templates.

Five strategies are available:

- ``keep-local``: the live content replaces the template, then the live
  path is linked to the template.
- ``keep-remote``: the live file is backed up, then linked to the
  unchanged template.
- ``merge``: an external merge tool edits a scratch copy seeded from the
  template; the result becomes the template and the live path is linked.
- ``backup-both``: the live content is saved beside the template as
  ``<name>.local.<timestamp>``; nothing else changes.
- ``interactive``: asks, per conflict, which of the above to use.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable

from ..errors import ExternalToolError, NoMergeToolError, StrataError
from ..fileops import backup_file, copy_file, local_copy_path, relink
from ..prompt import TerminalPrompt
from ..tools import MERGE_TOOLS, ExternalTools
from ..types import ConflictRecord, Resolution, ResolveReport, Strategy

logger = logging.getLogger(__name__)

MENU = [
    "1) Keep local version",
    "2) Keep remote version",
    "3) Merge changes (requires merge tool)",
    "4) View diff in external tool",
    "5) Edit file manually",
    "6) Keep both versions (create backup)",
    "7) Skip this conflict",
]


def _scratch_copy(source: Path, prefix: str) -> Path:
    fd, name = tempfile.mkstemp(prefix=prefix)
    os.close(fd)
    copy_file(source, Path(name))
    return Path(name)


def _same_file(live: Path, template: Path) -> bool:
    if not (os.path.exists(live) and os.path.exists(template)):
        return False
    return os.path.samefile(live, template)


class ConflictResolver:
    """Applies a resolution strategy to conflict records."""

    def __init__(self, prompt=None, tools=None):
        self.prompt = prompt or TerminalPrompt()
        self.tools = tools or ExternalTools()
        self._handlers: Dict[Strategy, Callable[[ConflictRecord], Resolution]] = {
            Strategy.INTERACTIVE: self.resolve_interactive,
            Strategy.KEEP_LOCAL: self.keep_local,
            Strategy.KEEP_REMOTE: self.keep_remote,
            Strategy.MERGE: self.merge,
            Strategy.BACKUP_BOTH: self.backup_both,
        }

    def resolve(self, record: ConflictRecord, strategy) -> Resolution:
        """Resolve one conflict.

        Raises:
            UnknownStrategyError: if ``strategy`` is not a known name.
        """
        strategy = Strategy.parse(strategy)
        logger.info(f"Resolving conflict for {record.live_path}")
        return self._handlers[strategy](record)

    def resolve_all(
        self, records: Iterable[ConflictRecord], strategy
    ) -> ResolveReport:
        """Resolve each record in turn.

        A failure is logged and recorded, and the next record is still
        processed.
        """
        strategy = Strategy.parse(strategy)
        report = ResolveReport()
        for record in records:
            try:
                resolution = self.resolve(record, strategy)
            except (StrataError, OSError) as e:
                logger.error(
                    f"Failed to resolve conflict for {record.live_path}: {e}"
                )
                report.failed.append((record.live_path, str(e)))
                continue
            report.resolved.append((record.live_path, resolution))
        return report

    def keep_local(self, record: ConflictRecord) -> Resolution:
        logger.info(f"Keeping local version for {record.live_path}")
        if _same_file(record.live_path, record.template_path):
            logger.debug(f"{record.live_path} already resolves to the template")
        else:
            copy_file(record.live_path, record.template_path)
        relink(record.template_path, record.live_path)
        return Resolution.KEPT_LOCAL

    def keep_remote(self, record: ConflictRecord) -> Resolution:
        logger.info(f"Keeping remote version for {record.live_path}")
        backup = backup_file(record.live_path)
        if backup:
            logger.info(f"Backed up local file to {backup}")
        relink(record.template_path, record.live_path)
        return Resolution.KEPT_REMOTE

    def merge(self, record: ConflictRecord) -> Resolution:
        """Merge with the first available external merge tool.

        The tool is called as ``<tool> <live> <scratch> <template>`` and is
        expected to leave the merged result in the scratch file.

        Raises:
            NoMergeToolError: if no merge tool is installed.
            ExternalToolError: if the merge tool exits with an error.
        """
        logger.info(f"Attempting to merge changes for {record.live_path}")
        tool = self.tools.find_merge_tool()
        if not tool:
            raise NoMergeToolError(MERGE_TOOLS)

        scratch = _scratch_copy(record.template_path, "strata-merge-")
        try:
            self.tools.run_checked(
                tool
                + [
                    str(record.live_path),
                    str(scratch),
                    str(record.template_path),
                ]
            )
            copy_file(scratch, record.template_path)
        finally:
            scratch.unlink()

        relink(record.template_path, record.live_path)
        logger.info(f"Successfully merged changes for {record.live_path}")
        return Resolution.MERGED

    def backup_both(self, record: ConflictRecord) -> Resolution:
        logger.info(f"Keeping both versions for {record.live_path}")
        target = local_copy_path(record.template_path)
        copy_file(record.live_path, target)
        logger.info(f"Created backup of local file at {target}")
        return Resolution.BACKED_UP_BOTH

    def resolve_interactive(self, record: ConflictRecord) -> Resolution:
        """Show the conflict and ask what to do until a final choice."""
        self.prompt.echo(f"\nConflict detected for {record.live_path}")
        self.prompt.echo(f"Diff:\n{record.diff}")
        self.prompt.echo("\nHow would you like to resolve this conflict?")
        for line in MENU:
            self.prompt.echo(line)

        while True:
            choice = self.prompt.ask("\nEnter your choice (1-7)").strip()
            if choice == "1":
                return self.keep_local(record)
            if choice == "2":
                return self.keep_remote(record)
            if choice == "3":
                return self.merge(record)
            if choice == "4":
                try:
                    self.view_diff(record)
                except (StrataError, OSError) as e:
                    logger.error(f"Failed to view diff in external tool: {e}")
            elif choice == "5":
                try:
                    self.edit_manually(record)
                except (StrataError, OSError) as e:
                    logger.error(f"Failed to edit file manually: {e}")
            elif choice == "6":
                return self.backup_both(record)
            elif choice == "7":
                logger.info(f"Skipping conflict for {record.live_path}")
                return Resolution.SKIPPED
            else:
                self.prompt.echo("Invalid choice, please try again")

    def view_diff(self, record: ConflictRecord):
        """Open both files in a diff viewer, or print the stored diff."""
        tool = self.tools.find_diff_tool()
        if not tool:
            self.prompt.echo(
                f"Diff between {record.live_path} and "
                f"{record.template_path}:\n{record.diff}"
            )
            return
        self.tools.run(
            tool + [str(record.live_path), str(record.template_path)]
        )

    def edit_manually(self, record: ConflictRecord) -> bool:
        """Edit a copy of the template and optionally adopt it.

        Returns True if the edited version was applied to the template and
        the live path was linked to it.
        """
        editor = self.tools.find_editor()
        if not editor:
            raise ExternalToolError(
                "No editor found, please set the EDITOR environment variable"
            )

        scratch = _scratch_copy(record.template_path, "strata-edit-")
        try:
            self.tools.run_checked(editor + [str(scratch)])
            if not self.prompt.confirm("Use this edited version?"):
                logger.info("Edited version discarded")
                return False
            copy_file(scratch, record.template_path)
        finally:
            scratch.unlink()

        relink(record.template_path, record.live_path)
        logger.info(f"Applied edited version to {record.live_path}")
        return True
