"""Shared fixtures: a home directory, a template root and terminal fakes."""

from pathlib import Path

import pytest

from strata.errors import ExternalToolError


class FakePrompt:
    """Scripted stand-in for TerminalPrompt."""

    def __init__(self):
        self.answers = []
        self.confirms = []
        self.messages = []
        self.questions = []

    def echo(self, message=""):
        self.messages.append(message)

    def confirm(self, question):
        self.questions.append(question)
        return self.confirms.pop(0) if self.confirms else False

    def ask(self, question):
        self.questions.append(question)
        return self.answers.pop(0)

    @property
    def output(self):
        return "\n".join(self.messages)


class FakeTools:
    """Stand-in for ExternalTools that records every launch.

    ``on_run`` is called with the argv of each launch, so a test can play
    the part of the merge tool or editor.
    """

    def __init__(self):
        self.merge = None
        self.diff = None
        self.editor = None
        self.on_run = None
        self.returncode = 0
        self.calls = []

    def find_merge_tool(self):
        return self.merge

    def find_diff_tool(self):
        return self.diff

    def find_editor(self):
        return self.editor

    def run(self, argv):
        argv = list(argv)
        self.calls.append(argv)
        if self.on_run:
            self.on_run(argv)
        return self.returncode

    def run_checked(self, argv):
        code = self.run(argv)
        if code != 0:
            raise ExternalToolError(f"{argv[0]} failed", returncode=code)


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def templates(tmp_path):
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture
def fake_prompt():
    return FakePrompt()


@pytest.fixture
def fake_tools():
    return FakeTools()


@pytest.fixture
def write():
    """Write a file, creating its parent directories."""

    def _write(path: Path, content: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
