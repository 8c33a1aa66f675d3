"""Locating and launching external merge, diff and editor programs."""

import logging
import os
import shlex
import shutil
import subprocess
from typing import List, Optional, Sequence

from .errors import ExternalToolError

logger = logging.getLogger(__name__)

# Preference order; entries may carry extra arguments
MERGE_TOOLS: List[str] = ["meld", "kdiff3", "vimdiff", "code -d"]
DIFF_TOOLS: List[str] = ["meld", "kdiff3", "vimdiff", "code -d", "diff -u"]
EDITORS: List[str] = ["nano", "vim", "vi", "emacs", "code"]


class ExternalTools:
    """Finds and runs interactive external programs.

    ``run`` inherits the terminal so the program can talk to the user, and
    blocks until it exits.
    """

    def which(self, command: str) -> Optional[str]:
        return shutil.which(command)

    def _first_available(self, candidates: Sequence[str]) -> Optional[List[str]]:
        for tool in candidates:
            argv = shlex.split(tool)
            if argv and self.which(argv[0]):
                return argv
        return None

    def find_merge_tool(self) -> Optional[List[str]]:
        return self._first_available(MERGE_TOOLS)

    def find_diff_tool(self) -> Optional[List[str]]:
        return self._first_available(DIFF_TOOLS)

    def find_editor(self) -> Optional[List[str]]:
        editor = os.environ.get("EDITOR", "").strip()
        if editor:
            return shlex.split(editor)
        return self._first_available(EDITORS)

    def run(self, argv: Sequence[str]) -> int:
        """Run ``argv`` attached to the terminal and return its exit code."""
        logger.info(f"Launching: {' '.join(argv)}")
        try:
            result = subprocess.run(list(argv), check=False)
        except FileNotFoundError as e:
            raise ExternalToolError(f"Could not start {argv[0]}: {e}")
        return result.returncode

    def run_checked(self, argv: Sequence[str]):
        """Like ``run`` but a non-zero exit raises ``ExternalToolError``."""
        code = self.run(argv)
        if code != 0:
            raise ExternalToolError(
                f"{argv[0]} exited with status {code}", returncode=code
            )
