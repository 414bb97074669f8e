"""Terminal output for scanner events: plain text and highlighted code blocks."""

from __future__ import annotations

import os
from typing import Optional

from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound
from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from .ansi import Ansi, console as default_console

DEFAULT_THEME = "monokai"


def is_supported_language(language: str) -> bool:
    """True when Pygments has a lexer registered under *language*."""
    if not language:
        return False
    try:
        get_lexer_by_name(language)
    except ClassNotFound:
        return False
    return True


class TerminalRenderer:
    """Write scanner output to a rich console in arrival order.

    Plain text goes through untouched (no markup, no wrapping). Code blocks
    keep their fences, dimmed, around the payload, which is highlighted when
    the language tag is known and written verbatim otherwise.
    """

    def __init__(self, console: Optional[Console] = None, theme: Optional[str] = None):
        self.console = console or default_console
        self.theme = theme or os.getenv("AI_CLI_THEME", DEFAULT_THEME)

    def write_text(self, text: str) -> None:
        self.console.file.write(text)
        self.console.file.flush()

    def write_code(self, language: str, code: str) -> None:
        self.console.print(Text("```" + language, style=Ansi.DIM))
        if code:
            if is_supported_language(language):
                syntax = Syntax(code, language, theme=self.theme, background_color="default")
                # Let the terminal wrap long lines so copied code stays intact.
                self.console.print(syntax.highlight(code), soft_wrap=True)
            else:
                self.console.file.write(code + "\n")
        self.console.print(Text("```", style=Ansi.DIM), end="")
        self.console.file.flush()

    def finish(self) -> None:
        self.console.file.write("\n")
        self.console.file.flush()
