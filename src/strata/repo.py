"""Git operations on the template directory."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

README_CONTENT = """# Dotfiles managed by strata

This repository contains dotfiles managed by strata.

## Structure

- common/ - Files common to all environments
- envs/ - Environment-specific configurations
- machine/ - Machine-specific configurations
"""


class TemplateRepo:
    """Runs git inside the template directory.

    The template directory is an ordinary (non-bare) clone; every command
    is run as ``git -C <path> ...`` with output captured as text.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def run(
        self, *args, check: bool = True, timeout: int = 60
    ) -> subprocess.CompletedProcess:
        """Run a git command in the template directory.

        Args:
            *args: Git command arguments (e.g., "status", "--porcelain")
            check: If True, raise on non-zero exit code
            timeout: Command timeout in seconds

        Returns:
            CompletedProcess with stdout/stderr captured as text
        """
        cmd = ["git", "-C", str(self.path)] + list(args)
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=check,
        )

    def is_repo(self) -> bool:
        return (self.path / ".git").exists()

    def changed_files(self) -> List[str]:
        """Paths with uncommitted changes, relative to the template root."""
        result = self.run("status", "--porcelain")
        files = []
        for line in result.stdout.splitlines():
            if len(line) > 3:
                files.append(line[3:].strip())
        return files

    def has_uncommitted_changes(self) -> bool:
        return bool(self.changed_files())

    def has_remote(self) -> bool:
        result = self.run("remote", check=False)
        return bool(result.stdout.strip())

    def commit_changes(self, message: str) -> bool:
        """Stage everything and commit. Returns False if nothing changed."""
        if not self.has_uncommitted_changes():
            logger.debug("No changes to commit")
            return False
        self.run("add", "-A")
        self.run("commit", "-m", message)
        logger.info(f"Committed changes: {message}")
        return True

    def pull(self):
        logger.info(f"Pulling changes into {self.path}")
        self.run("pull", "--ff-only", timeout=120)

    def push(self):
        logger.info(f"Pushing changes from {self.path}")
        self.run("push", timeout=120)

    def ahead_behind(self) -> Optional[tuple]:
        """(ahead, behind) relative to the upstream branch, or None."""
        result = self.run(
            "rev-list", "--left-right", "--count", "HEAD...@{upstream}",
            check=False,
        )
        if result.returncode != 0:
            return None
        parts = result.stdout.split()
        if len(parts) != 2:
            return None
        return int(parts[0]), int(parts[1])

    @classmethod
    def clone(cls, url: str, path: Path) -> "TemplateRepo":
        path = Path(path)
        logger.info(f"Cloning {url} to {path}")
        subprocess.run(
            ["git", "clone", url, str(path)],
            check=True,
            capture_output=True,
            text=True,
            timeout=120,
        )
        return cls(path)

    @classmethod
    def init(
        cls,
        path: Path,
        hostname: str,
        environment: str = "default",
        remote: Optional[str] = None,
    ) -> "TemplateRepo":
        """Create a new template repository with the tier skeleton.

        Creates ``common/``, ``envs/<environment>/``, ``machine/<hostname>/``
        and a README, then makes an initial commit.
        """
        path = Path(path)
        for tier_dir in (
            path / "common",
            path / "envs" / environment,
            path / "machine" / hostname,
        ):
            tier_dir.mkdir(parents=True, exist_ok=True)
            # git does not track empty directories
            (tier_dir / ".gitkeep").touch()
        readme = path / "README.md"
        if not readme.exists():
            readme.write_text(README_CONTENT)

        repo = cls(path)
        repo.run("init")
        if remote:
            repo.run("remote", "add", "origin", remote)
        repo.run("add", "-A")
        repo.run(
            "-c", "user.name=strata", "-c", "user.email=strata@local",
            "commit", "-m", "Initial commit",
        )
        logger.info(f"Initialized template repository at {path}")
        return repo
