from __future__ import annotations

from dataclasses import dataclass


def utf16_column(text: str, index: int) -> int:
    """Convert a Python string index within a line into a UTF-16 column."""
    prefix = text[:index]
    return len(prefix) + sum(1 for ch in prefix if ord(ch) > 0xFFFF)


def code_point_index(text: str, column: int) -> int:
    """Convert a UTF-16 column within a line back into a Python string index."""
    units = 0
    for i, ch in enumerate(text):
        if units >= column:
            return i
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(text)


@dataclass(frozen=True, order=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def from_coords(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
        return cls(Position(start_line, start_char), Position(end_line, end_char))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, position: Position) -> bool:
        """Half-open containment: start is inside, end is not."""
        return self.start <= position < self.end


@dataclass(frozen=True)
class TextEdit:
    range: Range
    new_text: str


@dataclass(frozen=True)
class LineRange:
    """Half-open interval of 0-based lines."""

    start: int
    end: int

    @property
    def line_count(self) -> int:
        return max(0, self.end - self.start)

    def overlaps(self, first_line: int, last_line: int) -> bool:
        """True when the inclusive span first_line..last_line touches this range."""
        return first_line < self.end and last_line >= self.start
