"""Tests for file primitives."""

import os
import stat
from datetime import datetime

from strata.fileops import (
    DIFF_UNAVAILABLE,
    FILES_IDENTICAL,
    backup_file,
    backup_path,
    copy_file,
    file_diff,
    local_copy_path,
    move_to_backup,
    relink,
    remove_path,
    safe_diff,
    timestamp,
)

NOW = datetime(2024, 1, 2, 3, 4, 5)


class TestFileDiff:
    """Tests for the positional line diff."""

    def test_identical(self, tmp_path, write):
        a = write(tmp_path / "a", "x\ny\n")
        b = write(tmp_path / "b", "x\ny\n")
        assert file_diff(a, b) == FILES_IDENTICAL

    def test_changed_line(self, tmp_path, write):
        a = write(tmp_path / "a", "x\ny\n")
        b = write(tmp_path / "b", "x\nz\n")
        assert file_diff(a, b) == "- y\n+ z\n"

    def test_extra_line_in_second(self, tmp_path, write):
        a = write(tmp_path / "a", "x")
        b = write(tmp_path / "b", "x\ny")
        assert file_diff(a, b) == "+ y\n"

    def test_extra_line_in_first(self, tmp_path, write):
        a = write(tmp_path / "a", "x\ny")
        b = write(tmp_path / "b", "x")
        assert file_diff(a, b) == "- y\n"

    def test_lines_are_not_aligned(self, tmp_path, write):
        """An inserted line shifts every following pair."""
        a = write(tmp_path / "a", "a\nb")
        b = write(tmp_path / "b", "new\na\nb")
        assert file_diff(a, b) == "- a\n+ new\n- b\n+ a\n+ b\n"

    def test_safe_diff_placeholder(self, tmp_path, write):
        a = write(tmp_path / "a", "x")
        assert safe_diff(a, tmp_path / "missing") == DIFF_UNAVAILABLE


class TestBackupNames:
    """Tests for backup and local copy names."""

    def test_timestamp_format(self):
        assert timestamp(NOW) == "20240102030405"

    def test_backup_path(self, tmp_path):
        path = backup_path(tmp_path / ".bashrc", NOW)
        assert path.name == ".bashrc.strata.bak.20240102030405"

    def test_backup_path_never_reuses_a_name(self, tmp_path, write):
        write(tmp_path / ".bashrc.strata.bak.20240102030405")
        write(tmp_path / ".bashrc.strata.bak.20240102030405.1")

        path = backup_path(tmp_path / ".bashrc", NOW)

        assert path.name == ".bashrc.strata.bak.20240102030405.2"

    def test_local_copy_path(self, tmp_path):
        path = local_copy_path(tmp_path / "common" / ".vimrc", NOW)
        assert path == tmp_path / "common" / ".vimrc.local.20240102030405"


class TestBackupFile:
    """Tests for backup_file."""

    def test_missing_path(self, tmp_path):
        assert backup_file(tmp_path / "missing") is None

    def test_dangling_symlink(self, tmp_path):
        link = tmp_path / "link"
        os.symlink(str(tmp_path / "missing"), str(link))
        assert backup_file(link) is None

    def test_copies_file(self, tmp_path, write):
        path = write(tmp_path / ".bashrc", "content")

        backup = backup_file(path)

        assert backup.read_text() == "content"
        assert path.read_text() == "content"
        assert ".strata.bak." in backup.name

    def test_follows_symlink(self, tmp_path, write):
        target = write(tmp_path / "target", "linked content")
        link = tmp_path / "link"
        os.symlink(str(target), str(link))

        backup = backup_file(link)

        assert not backup.is_symlink()
        assert backup.read_text() == "linked content"

    def test_copies_directory(self, tmp_path, write):
        write(tmp_path / "dir" / "file", "x")

        backup = backup_file(tmp_path / "dir")

        assert (backup / "file").read_text() == "x"


class TestMoves:
    """Tests for copy, move, remove and relink."""

    def test_copy_file_creates_parents(self, tmp_path, write):
        src = write(tmp_path / "src", "x")
        dst = tmp_path / "a" / "b" / "dst"

        copy_file(src, dst)

        assert dst.read_text() == "x"

    def test_copy_file_mode(self, tmp_path, write):
        src = write(tmp_path / "src", "x")
        dst = tmp_path / "dst"

        copy_file(src, dst, 0o600)

        assert stat.S_IMODE(dst.stat().st_mode) == 0o600

    def test_move_to_backup(self, tmp_path, write):
        path = write(tmp_path / ".zshrc", "x")

        backup = move_to_backup(path)

        assert not path.exists()
        assert backup.read_text() == "x"

    def test_remove_path(self, tmp_path, write):
        write(tmp_path / "dir" / "file")
        remove_path(tmp_path / "dir")
        remove_path(tmp_path / "missing")
        assert not (tmp_path / "dir").exists()

    def test_relink_replaces_directory(self, tmp_path, write):
        template = write(tmp_path / "template", "t")
        write(tmp_path / "live" / "file")

        relink(template, tmp_path / "live")

        assert os.readlink(tmp_path / "live") == str(template)

    def test_relink_replaces_symlink(self, tmp_path, write):
        old = write(tmp_path / "old", "o")
        new = write(tmp_path / "new", "n")
        live = tmp_path / "live"
        os.symlink(str(old), str(live))

        relink(new, live)

        assert os.readlink(live) == str(new)
        assert old.read_text() == "o"
