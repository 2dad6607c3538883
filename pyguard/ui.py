"""User-facing diagnostics — Rich console output on stderr."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text


class UI:
    """Diagnostics sink used by the plugin utilities.

    Messages are printed as plain ``Text`` so plugin names or error strings
    containing square brackets are never interpreted as Rich markup.
    """

    def __init__(self, console: Console | None = None, quiet: bool = False, debug: bool = False) -> None:
        self.console = console or Console(stderr=True)
        self.quiet = quiet
        self.show_debug = debug

    def info(self, message: str) -> None:
        if self.quiet:
            return
        self.console.print(Text(str(message)))

    def warning(self, message: str) -> None:
        self.console.print(Text.assemble(("WARNING: ", "bold yellow"), str(message)))

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("ERROR: ", "bold red"), str(message)))

    def debug(self, message: str) -> None:
        if not self.show_debug:
            return
        self.console.print(Text.assemble(("DEBUG: ", "dim"), str(message)))


ui = UI()
