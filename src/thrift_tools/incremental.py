from __future__ import annotations

import logging
from typing import Dict, List, Optional

from thrift_tools.models import LineRange

logger = logging.getLogger(__name__)


def merge_line_ranges(ranges: List[LineRange]) -> List[LineRange]:
    """Merge overlapping or touching line ranges."""
    merged: List[LineRange] = []
    for rng in sorted(ranges, key=lambda r: (r.start, r.end)):
        if merged and rng.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = LineRange(last.start, max(last.end, rng.end))
        else:
            merged.append(rng)
    return merged


class IncrementalTracker:
    """Records dirty line ranges per document between two formatting runs."""

    def __init__(self, max_dirty_lines: int = 200):
        self.max_dirty_lines = max_dirty_lines
        self._dirty: Dict[str, List[LineRange]] = {}

    def mark_change(self, uri: str, start_line: int, end_line: int, inserted_text: str = "") -> None:
        """Record an edit replacing lines start_line..end_line (inclusive).

        Lines added by ``inserted_text`` extend the dirty range downwards.
        """
        last = end_line + inserted_text.count("\n")
        ranges = self._dirty.setdefault(uri, [])
        ranges.append(LineRange(start_line, last + 1))
        self._dirty[uri] = merge_line_ranges(ranges)

    def peek_dirty_ranges(self, uri: str) -> List[LineRange]:
        return list(self._dirty.get(uri, []))

    def consume_dirty_range(self, uri: str) -> Optional[LineRange]:
        """Return and forget the dirty span of ``uri``.

        None means nothing is dirty or the dirty lines exceed the ceiling, in
        which case the caller formats the whole document.
        """
        ranges = self._dirty.pop(uri, [])
        if not ranges:
            return None
        total = sum(r.line_count for r in ranges)
        if total > self.max_dirty_lines:
            logger.debug("%s has %d dirty lines, over the limit of %d", uri, total, self.max_dirty_lines)
            return None
        return LineRange(ranges[0].start, ranges[-1].end)

    def clear(self, uri: Optional[str] = None) -> None:
        if uri is None:
            self._dirty.clear()
        else:
            self._dirty.pop(uri, None)
