"""Terminal interaction used by the diff prompt and interactive resolution.

The engines only call ``echo``, ``confirm`` and ``ask``, so anything with
those three methods can stand in for the terminal.
"""

import typer


class TerminalPrompt:
    """Prompts on the controlling terminal via typer."""

    def echo(self, message: str = ""):
        typer.echo(message)

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question. Defaults to no."""
        return typer.confirm(question, default=False)

    def ask(self, question: str) -> str:
        return typer.prompt(question, default="", show_default=False)


class AssumeYesPrompt(TerminalPrompt):
    """Answers yes to every confirmation without blocking."""

    def confirm(self, question: str) -> bool:
        return True
