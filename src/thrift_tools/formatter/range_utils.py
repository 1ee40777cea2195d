"""Whole-line range normalization and minimal edit computation."""

from __future__ import annotations

from typing import List

from thrift_tools.document import TextDocument
from thrift_tools.models import Position, Range, TextEdit, utf16_column


def normalize_formatting_range(document: TextDocument, rng: Range) -> Range:
    """Extend a range to start at column 0 and end at the end of its last line."""
    last_line = max(0, document.line_count - 1)
    start_line = min(max(rng.start.line, 0), last_line)
    end_line = min(max(rng.end.line, start_line), last_line)
    end_text = document.line_at(end_line).text
    return Range(Position(start_line, 0), Position(end_line, utf16_column(end_text, len(end_text))))


def _common_prefix(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def _common_suffix(a: str, b: str, prefix: int) -> int:
    limit = min(len(a), len(b)) - prefix
    i = 0
    while i < limit and a[len(a) - 1 - i] == b[len(b) - 1 - i]:
        i += 1
    return i


def build_minimal_edits(
    document: TextDocument,
    rng: Range,
    original_text: str,
    formatted_text: str,
) -> List[TextEdit]:
    """Replace only the lines of ``rng`` that differ after formatting.

    The common prefix and suffix are trimmed and the remaining span is widened
    to whole lines, giving at most one edit.
    """
    if original_text == formatted_text:
        return []

    prefix = _common_prefix(original_text, formatted_text)
    suffix = _common_suffix(original_text, formatted_text, prefix)

    start = original_text.rfind("\n", 0, prefix) + 1
    original_end = len(original_text) - suffix
    line_end = original_text.find("\n", original_end)
    if line_end < 0:
        line_end = len(original_text)
    formatted_end = len(formatted_text) - suffix + (line_end - original_end)

    base = document.offset_at(rng.start)
    edit_range = Range(document.position_at(base + start), document.position_at(base + line_end))
    return [TextEdit(edit_range, formatted_text[start:formatted_end])]
