from .ansi import (
    Ansi,
    ERROR_LABEL,
    console,
    err_console,
)
from .highlight import TerminalRenderer, is_supported_language
from .spinner import Spinner

__all__ = [
    "Ansi",
    "ERROR_LABEL",
    "console",
    "err_console",
    "TerminalRenderer",
    "is_supported_language",
    "Spinner",
]
