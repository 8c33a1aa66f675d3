"""Tests for layered application."""

import os

from strata.apply import apply_layers
from strata.config import TrackingList
from strata.types import ApplyOptions

NO_PROMPT = ApplyOptions(backup=True, diff_prompt=False)


class TestApplyLayers:
    """Tests for apply_layers."""

    def test_links_every_tier(self, templates, home, write):
        bashrc = write(templates / "common" / ".bashrc")
        init = write(templates / "envs" / "work" / ".config" / "nvim" / "init.lua")
        ssh = write(templates / "machine" / "laptop" / ".ssh" / "config")

        report = apply_layers(templates, "work", "laptop", home, NO_PROMPT)

        assert os.readlink(home / ".bashrc") == str(bashrc)
        assert os.readlink(home / ".config" / "nvim" / "init.lua") == str(init)
        assert os.readlink(home / ".ssh" / "config") == str(ssh)
        assert (home / ".config" / "nvim").is_dir()
        assert not (home / ".config" / "nvim").is_symlink()
        assert len(report.linked) == 3
        assert report.success

    def test_missing_tiers_are_skipped(self, templates, home, write):
        write(templates / "common" / ".bashrc")

        report = apply_layers(templates, "work", "laptop", home, NO_PROMPT)

        assert report.linked == [home / ".bashrc"]

    def test_machine_tier_wins(self, templates, home, write):
        write(templates / "common" / ".vimrc", "A")
        machine = write(templates / "machine" / "laptop" / ".vimrc", "B")

        apply_layers(templates, None, "laptop", home, NO_PROMPT)

        assert os.readlink(home / ".vimrc") == str(machine)

    def test_later_tier_replaces_earlier_link(self, templates, home, write):
        """A link left by a less specific tier is treated as stale."""
        write(templates / "common" / ".vimrc", "A")
        apply_layers(templates, None, "laptop", home, NO_PROMPT)
        machine = write(templates / "machine" / "laptop" / ".vimrc", "B")

        report = apply_layers(templates, None, "laptop", home, NO_PROMPT)

        assert report.replaced == [home / ".vimrc"]
        assert os.readlink(home / ".vimrc") == str(machine)

    def test_second_run_mutates_nothing(self, templates, home, write):
        write(templates / "common" / ".vimrc", "A")
        write(templates / "envs" / "work" / ".vimrc", "B")
        write(templates / "machine" / "laptop" / ".zshrc", "C")
        write(home / ".zshrc", "local")

        first = apply_layers(templates, "work", "laptop", home, NO_PROMPT)
        second = apply_layers(templates, "work", "laptop", home, NO_PROMPT)

        assert first.mutations == 2
        assert len(first.backups) == 1
        assert second.mutations == 0
        assert second.backups == []
        assert len(second.unchanged) == 2
        assert len(list(home.glob("*.strata.bak.*"))) == 1

    def test_reserved_entries_not_linked(self, templates, home, write):
        write(templates / "common" / "README.md")
        write(templates / "common" / ".git" / "HEAD")
        write(templates / "common" / ".gitconfig")

        report = apply_layers(templates, None, "laptop", home, NO_PROMPT)

        assert report.mutations == 0
        assert list(home.iterdir()) == []

    def test_registers_tracking(self, templates, home, write):
        write(templates / "common" / ".config" / "git" / "config")
        tracking = TrackingList()

        apply_layers(templates, None, "laptop", home, NO_PROMPT, tracking=tracking)

        assert list(tracking) == [".config/git/config"]

    def test_failure_does_not_stop_walk(self, templates, home, write):
        """An entry that cannot be linked is reported; the rest still apply."""
        write(templates / "common" / ".config" / "app" / "conf")
        vimrc = write(templates / "common" / ".vimrc")
        write(home / ".config", "a regular file where a directory belongs")

        report = apply_layers(templates, None, "laptop", home, NO_PROMPT)

        assert not report.success
        assert home / ".config" / "app" / "conf" in [p for p, _ in report.failed]
        assert os.readlink(home / ".vimrc") == str(vimrc)

    def test_declined_prompt_is_not_a_failure(
        self, templates, home, write, fake_prompt
    ):
        write(templates / "common" / ".vimrc", "A")
        write(home / ".vimrc", "B")
        fake_prompt.confirms = [False]

        report = apply_layers(
            templates, None, "laptop", home, ApplyOptions(), prompt=fake_prompt
        )

        assert report.skipped == [home / ".vimrc"]
        assert report.success
        assert (home / ".vimrc").read_text() == "B"

    def test_default_arguments_ask_on_the_terminal(
        self, templates, home, write, mocker
    ):
        write(templates / "common" / ".vimrc", "remote\n")
        write(templates / "common" / ".bashrc")
        live = write(home / ".vimrc", "local\n")
        mocker.patch("strata.prompt.typer.echo")
        confirm = mocker.patch("strata.prompt.typer.confirm", return_value=False)

        report = apply_layers(templates, None, "laptop", home)

        confirm.assert_called_once_with(f"Apply changes to {live}?", default=False)
        assert report.skipped == [live]
        assert report.linked == [home / ".bashrc"]
        assert report.success
