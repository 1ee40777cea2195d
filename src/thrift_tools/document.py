from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import List, Optional

from thrift_tools.models import Position, Range, code_point_index, utf16_column
from thrift_tools.parser.thrift_tokenizer import split_lines


@dataclass(frozen=True)
class TextLine:
    line_number: int
    text: str


class TextDocument:
    """In-memory document with line access and offset/position conversion.

    Lines are split once; positions use UTF-16 columns like editors do.
    """

    def __init__(self, text: str, uri: str = ""):
        self.uri = uri
        self._text = text
        self._lines = split_lines(text)
        self._line_starts: List[int] = []
        offset = 0
        for raw in text.split("\n"):
            self._line_starts.append(offset)
            offset += len(raw) + 1

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, line: int) -> TextLine:
        return TextLine(line, self._lines[line])

    def get_text(self, rng: Optional[Range] = None) -> str:
        if rng is None:
            return self._text
        return self._text[self.offset_at(rng.start):self.offset_at(rng.end)]

    def offset_at(self, position: Position) -> int:
        if position.line >= len(self._lines):
            return len(self._text)
        line = max(position.line, 0)
        return self._line_starts[line] + code_point_index(self._lines[line], position.character)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self._text)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        text = self._lines[line]
        return Position(line, utf16_column(text, min(offset - self._line_starts[line], len(text))))

    def full_range(self) -> Range:
        last = len(self._lines) - 1
        return Range(Position(0, 0), Position(last, utf16_column(self._lines[last], len(self._lines[last]))))
