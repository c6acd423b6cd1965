"""Append-only text buffer that keeps track of indentation."""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager

TABSTOP = 2


class Sink:
    """Buffers generated code and indents each line by the current indentation level.

    Text is appended with `write`. Lines are terminated explicitly with `end_line`, and blocks
    (a line followed by an empty line) with `end_block`. Indentation is inserted lazily, right
    before the first text written on a fresh line, so empty lines never carry trailing spaces.
    """

    def __init__(self, tabstop: int = TABSTOP):
        self._buffer = io.StringIO()
        self._tabstop = tabstop
        self._level = 0
        self._at_line_start = True

    @property
    def level(self) -> int:
        """The current indentation level."""
        return self._level

    def indent(self):
        """Increase the indentation level."""
        self._level += 1

    def dedent(self):
        """Decrease the indentation level."""
        assert self._level > 0, "Cannot dedent below level zero."
        self._level -= 1

    @contextmanager
    def indented(self) -> Iterator[Sink]:
        """Indent everything written inside the `with` block by one level."""
        self.indent()
        try:
            yield self
        finally:
            self.dedent()

    def write(self, *parts: object) -> Sink:
        """Append text to the current line.

        Args:
            *parts: Objects to append, converted with `str`.

        Returns:
            Sink: This sink, so that calls can be chained.
        """
        text = "".join(str(part) for part in parts)
        if not text:
            return self

        if self._at_line_start:
            self._buffer.write(" " * (self._tabstop * self._level))
            self._at_line_start = False

        self._buffer.write(text)
        return self

    def end_line(self) -> Sink:
        """Terminate the current line."""
        self._buffer.write("\n")
        self._at_line_start = True
        return self

    def end_block(self) -> Sink:
        """Terminate the current line and add an empty line after it."""
        self._buffer.write("\n\n")
        self._at_line_start = True
        return self

    def line(self, *parts: object) -> Sink:
        """Write a complete line."""
        return self.write(*parts).end_line()

    def block(self, *parts: object) -> Sink:
        """Write a complete line followed by an empty line."""
        return self.write(*parts).end_block()

    def getvalue(self) -> str:
        """Return everything written so far."""
        return self._buffer.getvalue()
