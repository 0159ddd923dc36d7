"""Source buffers and spans for position-accurate text extraction.

A ``SourceBuffer`` holds the text of one document together with its
line-start table, computed once. A ``Span`` is a reference to a buffer plus
an inclusive ``[start, end]`` pair of positions. Spans never copy the text:
``contents`` slices the shared buffer on demand, and ``subspan`` derives a
narrower span over the same buffer.
"""

from __future__ import annotations

from bisect import bisect_right

from pydantic import BaseModel, Field


class Position(BaseModel):
    """A 1-indexed line/column coordinate, optionally tagged with a file name.

    Ordering compares ``(line, column)`` only; equality also compares the file.
    """

    file: str | None = None
    line: int = Field(1, ge=1)
    column: int = Field(1, ge=1)

    model_config = {"frozen": True}

    def _key(self) -> tuple[int, int]:
        return (self.line, self.column)

    def __lt__(self, other: Position) -> bool:
        return self._key() < other._key()

    def __le__(self, other: Position) -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: Position) -> bool:
        return self._key() > other._key()

    def __ge__(self, other: Position) -> bool:
        return self._key() >= other._key()

    def subposition(self, line: int, column: int) -> Position:
        """Compose a position relative to this one into an absolute position.

        ``(1, c)`` stays on this line, shifted right by ``c - 1`` columns; any
        later relative line keeps its own column.
        """
        if line == 1:
            return self.model_copy(update={"column": self.column + column - 1})
        return self.model_copy(update={"line": self.line + line - 1, "column": column})

    def with_offset_row(self, offset: int) -> Position:
        return self.model_copy(update={"line": self.line + offset})

    def with_offset_column(self, offset: int) -> Position:
        return self.model_copy(update={"column": self.column + offset})

    def with_file(self, file: str) -> Position:
        return self.model_copy(update={"file": file})

    def __str__(self) -> str:
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"


def _line_starts(text: str) -> list[int]:
    """Offset of column 1 for every line; index 0 is line 1."""
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


class SourceBuffer:
    """The text of one document and its line-start index."""

    __slots__ = ("text", "file_name", "line_starts")

    def __init__(self, text: str, file_name: str | None = None) -> None:
        self.text = text
        self.file_name = file_name
        self.line_starts = _line_starts(text)

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def to_offset(self, position: Position, *, inclusive: bool = False) -> int:
        """Convert a position to a string offset.

        With ``inclusive=True`` the result is one past the character at
        ``position``, suitable as an exclusive slice stop.
        """
        if not 1 <= position.line <= len(self.line_starts):
            raise ValueError(f"Line {position.line} is outside the buffer")
        offset = self.line_starts[position.line - 1] + position.column
        return offset if inclusive else offset - 1

    def position_at(self, offset: int) -> Position:
        if not 0 <= offset <= len(self.text):
            raise ValueError(f"Offset {offset} is outside the buffer")
        index = bisect_right(self.line_starts, offset) - 1
        return Position(
            file=self.file_name,
            line=index + 1,
            column=offset - self.line_starts[index] + 1,
        )

    def span(self, start: Position, end: Position) -> Span:
        return Span(self, start, end)

    def span_from_offsets(self, start: int, stop: int) -> Span:
        """Span over ``text[start:stop]``; the range must be non-empty."""
        if stop <= start:
            raise ValueError(f"Empty range {start}..{stop}")
        return Span(self, self.position_at(start), self.position_at(stop - 1))

    def line_span(self, first_line: int, last_line: int) -> Span:
        """Span covering whole lines, including the newline ending the last one."""
        start = self.line_starts[first_line - 1]
        if last_line < len(self.line_starts):
            stop = self.line_starts[last_line]
        else:
            stop = len(self.text)
        return self.span_from_offsets(start, stop)

    def full_span(self) -> Span:
        return self.span_from_offsets(0, len(self.text))

    def __repr__(self) -> str:
        return f"SourceBuffer(file_name={self.file_name!r}, lines={self.line_count})"


class Span:
    """An inclusive range of positions over a ``SourceBuffer``.

    Equality and ordering look at coordinates only, never at the buffer.
    """

    __slots__ = ("_buffer", "start", "end")

    def __init__(self, buffer: SourceBuffer, start: Position, end: Position) -> None:
        if end < start:
            raise ValueError(f"Span end {end} precedes start {start}")
        if buffer.to_offset(end, inclusive=True) > len(buffer.text):
            raise ValueError(f"Span end {end} exceeds the buffer")
        self._buffer = buffer
        self.start = start
        self.end = end

    @property
    def buffer(self) -> SourceBuffer:
        return self._buffer

    @property
    def file_name(self) -> str | None:
        return self._buffer.file_name

    @property
    def contents(self) -> str:
        start = self._buffer.to_offset(self.start)
        stop = self._buffer.to_offset(self.end, inclusive=True)
        return self._buffer.text[start:stop]

    def subspan(self, start: Position, end: Position) -> Span:
        """Derive a span from positions relative to this span's start.

        ``Position(line=1, column=1)`` is this span's first character.
        """
        return Span(
            self._buffer,
            self.start.subposition(start.line, start.column),
            self.start.subposition(end.line, end.column),
        )

    def _key(self) -> tuple[int, int, int, int]:
        return (self.start.line, self.start.column, self.end.line, self.end.column)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Span):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Span) -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"Span({self.start}..{self.end})"
