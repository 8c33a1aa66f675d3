"""Tests for TemplateRepo."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from strata.repo import TemplateRepo


def completed(stdout="", returncode=0):
    return MagicMock(stdout=stdout, stderr="", returncode=returncode)


class TestTemplateRepo:
    """Tests for TemplateRepo basics."""

    def test_run_uses_template_dir(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed()
            repo.run("status", "--porcelain")

        args = mock_run.call_args[0][0]
        assert args == ["git", "-C", str(tmp_path), "status", "--porcelain"]
        assert mock_run.call_args[1]["check"] is True

    def test_is_repo(self, tmp_path):
        repo = TemplateRepo(tmp_path)
        assert repo.is_repo() is False
        (tmp_path / ".git").mkdir()
        assert repo.is_repo() is True


class TestChangedFiles:
    """Tests for changed_files and has_uncommitted_changes."""

    def test_parses_porcelain(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed(
                " M common/.vimrc\n?? envs/work/.zshrc\n"
            )
            assert repo.changed_files() == ["common/.vimrc", "envs/work/.zshrc"]

    def test_clean(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed("")
            assert repo.has_uncommitted_changes() is False


class TestCommitChanges:
    """Tests for commit_changes."""

    def test_nothing_to_commit(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed("")
            assert repo.commit_changes("msg") is False

        mock_run.assert_called_once()

    def test_commits_everything(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed(" M common/.vimrc\n")
            assert repo.commit_changes("Added tracked files") is True

        commands = [c[0][0][3:] for c in mock_run.call_args_list]
        assert commands == [
            ["status", "--porcelain"],
            ["add", "-A"],
            ["commit", "-m", "Added tracked files"],
        ]

    def test_commit_failure_raises(self, tmp_path):
        repo = TemplateRepo(tmp_path)

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.side_effect = [
                completed(" M common/.vimrc\n"),
                completed(),
                subprocess.CalledProcessError(1, "git", stderr="nothing"),
            ]
            with pytest.raises(subprocess.CalledProcessError):
                repo.commit_changes("msg")


class TestRemote:
    """Tests for remote related commands."""

    def test_has_remote(self, tmp_path):
        repo = TemplateRepo(tmp_path)
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed("origin\n")
            assert repo.has_remote() is True
            mock_run.return_value = completed("")
            assert repo.has_remote() is False

    def test_ahead_behind(self, tmp_path):
        repo = TemplateRepo(tmp_path)
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed("2\t1\n")
            assert repo.ahead_behind() == (2, 1)

    def test_ahead_behind_without_upstream(self, tmp_path):
        repo = TemplateRepo(tmp_path)
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed("", returncode=128)
            assert repo.ahead_behind() is None

    def test_pull_and_push(self, tmp_path):
        repo = TemplateRepo(tmp_path)
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed()
            repo.pull()
            repo.push()

        commands = [c[0][0][3:] for c in mock_run.call_args_list]
        assert commands == [["pull", "--ff-only"], ["push"]]


class TestClone:
    """Tests for clone."""

    def test_clone_success(self, tmp_path):
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed()
            repo = TemplateRepo.clone("https://example.com/dotfiles.git", tmp_path / "t")

        assert repo.path == tmp_path / "t"
        args = mock_run.call_args[0][0]
        assert args == ["git", "clone", "https://example.com/dotfiles.git", str(tmp_path / "t")]

    def test_clone_failure_raises(self, tmp_path):
        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.CalledProcessError(
                128, "git", stderr="fatal: repository not found"
            )
            with pytest.raises(subprocess.CalledProcessError):
                TemplateRepo.clone("https://example.com/missing.git", tmp_path / "t")


class TestInit:
    """Tests for creating a new template repository."""

    def test_creates_skeleton(self, tmp_path):
        path = tmp_path / "templates"

        with patch("strata.repo.subprocess.run") as mock_run:
            mock_run.return_value = completed()
            TemplateRepo.init(path, "laptop", "work", remote="git@example.com:me/d.git")

        assert (path / "common").is_dir()
        assert (path / "envs" / "work").is_dir()
        assert (path / "machine" / "laptop").is_dir()
        assert "strata" in (path / "README.md").read_text()
        commands = [c[0][0][3:] for c in mock_run.call_args_list]
        assert commands[0] == ["init"]
        assert commands[1] == ["remote", "add", "origin", "git@example.com:me/d.git"]
        assert commands[-1][-3:] == ["commit", "-m", "Initial commit"]
