"""Incremental scanner that pulls fenced code blocks out of a streamed reply.

Fragments arrive in whatever sizes the network hands them over. Plain text is
forwarded to the sink as soon as it cannot be part of a fence marker; a fenced
block is held back until its closing marker arrives and is then passed on as
a single ``write_code`` call so the renderer can highlight it in one go.
"""

from __future__ import annotations

import codecs
from typing import List, Protocol, Union

FENCE = "```"

OUTSIDE_BLOCK = "outside_block"
INSIDE_UNRESOLVED_BLOCK = "inside_unresolved_block"


class Sink(Protocol):
    def write_text(self, text: str) -> None: ...

    def write_code(self, language: str, code: str) -> None: ...


def split_block(inner: str) -> "tuple[str, str]":
    """Return ``(language, code)`` for the text between two fence markers."""
    if "\n" not in inner:
        return "", inner
    language, code = inner.split("\n", 1)
    if code.endswith("\n"):
        code = code[:-1]
    return language.strip(), code


class CodeBlockScanner:
    """Two-state scanner feeding a :class:`Sink`.

    ``text`` accumulates everything fed so far regardless of how it was
    written out, so callers can persist the full reply afterwards.
    """

    def __init__(self, sink: Sink):
        self._sink = sink
        self._buffer = ""
        self._received: List[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.state = OUTSIDE_BLOCK

    @property
    def text(self) -> str:
        return "".join(self._received)

    def feed(self, fragment: Union[str, bytes]) -> None:
        if isinstance(fragment, bytes):
            fragment = self._decoder.decode(fragment)
        if not fragment:
            return
        self._received.append(fragment)
        self._buffer += fragment
        self._scan()

    def finish(self) -> str:
        """Flush everything still buffered as plain text and return ``text``."""
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self._received.append(tail)
            self._buffer += tail
            self._scan()
        if self._buffer:
            self._sink.write_text(self._buffer)
            self._buffer = ""
        self.state = OUTSIDE_BLOCK
        return self.text

    def _scan(self) -> None:
        buf = self._buffer
        while True:
            start = buf.find(FENCE)
            if start == -1:
                break
            end = buf.find(FENCE, start + len(FENCE))
            if end == -1:
                break
            if start:
                self._sink.write_text(buf[:start])
            language, code = split_block(buf[start + len(FENCE):end])
            self._sink.write_code(language, code)
            buf = buf[end + len(FENCE):]

        start = buf.find(FENCE)
        if start != -1:
            # Opening marker without its closing one yet.
            if start:
                self._sink.write_text(buf[:start])
            self._buffer = buf[start:]
            self.state = INSIDE_UNRESOLVED_BLOCK
            return

        # Up to two trailing backticks may be the first half of a marker.
        held = len(buf) - len(buf.rstrip("`"))
        flush = buf[: len(buf) - held] if held else buf
        if flush:
            self._sink.write_text(flush)
        self._buffer = buf[len(flush):]
        self.state = OUTSIDE_BLOCK
