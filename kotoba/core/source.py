"""Byte-oriented reader over kotoba source text. Input is assumed to be ASCII: any other byte is passed through as an
opaque value. End of input is represented by None, never by an error.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Line/column of a byte in the source. Both start at 1."""
    line: int = 1
    column: int = 1

    def __str__(self):
        return f"{self.line}:{self.column}"


class SourceCursor:
    """Holds the source bytes, an index into them and the current line/column."""

    def __init__(self, source):
        if isinstance(source, str):
            source = source.encode("utf-8")

        self.source = source
        self.index = 0

        self._line = 1
        self._column = 1

    def peek(self):
        """Returns the next byte without consuming it, or None if the cursor is exhausted."""
        if self.index < len(self.source):
            return self.source[self.index]
        return None

    def peek_second(self):
        """Returns the byte after the next one without consuming anything, or None."""
        if self.index + 1 < len(self.source):
            return self.source[self.index + 1]
        return None

    def next(self):
        """Consumes and returns the next byte, or None. Newlines advance the line and reset the column."""
        byte = self.peek()
        if byte is None:
            return None

        self.index += 1
        if byte == ord("\n"):
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return byte

    def expect(self, expected):
        """Consumes the next byte only if it is expected. Returns whether or not it was consumed."""
        if isinstance(expected, str):
            expected = ord(expected)

        if self.peek() == expected:
            self.next()
            return True
        return False

    def consume_while(self, predicate):
        """Consumes bytes while predicate(byte) is true and returns them. The first failing byte is not consumed."""
        start = self.index
        while self.peek() is not None and predicate(self.peek()):
            self.next()
        return self.source[start:self.index]

    def current_position(self):
        """Snapshot of the position of the next byte."""
        return Position(self._line, self._column)

    @property
    def exhausted(self):
        return self.index >= len(self.source)
