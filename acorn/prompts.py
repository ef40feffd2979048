"""Yes/no prompts and notifications shown to the user."""
from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm


class Prompter(Protocol):
    def confirm(self, message: str) -> bool: ...

    def notify(self, message: str) -> None: ...


class ConsolePrompter:
    """Prompts on the terminal."""

    def __init__(self, console: Console = None, assume_yes: bool = False):
        self.console = console or Console()
        self.assume_yes = assume_yes

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        return Confirm.ask(message, console=self.console, default=False)

    def notify(self, message: str) -> None:
        self.console.print(f"[green]{message}[/]")
