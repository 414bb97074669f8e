"""Spinner shown while waiting for the first fragment of a reply."""
from __future__ import annotations

from yaspin import yaspin

from .ansi import console


class Spinner:
    """Small yaspin spinner that is a no-op when stdout is not a terminal."""

    def __init__(self, text: str = "", enabled: bool = True):
        self._enabled = enabled
        self._started = False
        self._spinner = yaspin(text=text) if enabled else None

    def start(self) -> None:
        if self._started or self._spinner is None:
            return
        console.file.flush()
        self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._spinner.stop()
        self._started = False

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
