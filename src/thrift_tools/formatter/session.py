from __future__ import annotations

import logging
from typing import List, Optional

from thrift_tools.cache import AstCache, TtlCache
from thrift_tools.document import TextDocument
from thrift_tools.incremental import IncrementalTracker
from thrift_tools.models import LineRange, Position, Range, TextEdit
from thrift_tools.parser.thrift_ast import Document
from thrift_tools.parser.thrift_parser import ThriftParser

from .formatter_core import format_segments, format_thrift_content
from .options import OptionsLike, resolve_options
from .range_utils import build_minimal_edits, normalize_formatting_range

logger = logging.getLogger(__name__)


class ThriftFormatter:
    """Formatting entry point for editor-like callers.

    All collaborators are optional: without an AstCache every call parses,
    without a segment cache incremental runs re-print everything, and
    without a tracker documents are always formatted whole.
    """

    def __init__(
        self,
        options: OptionsLike = None,
        ast_cache: Optional[AstCache] = None,
        segment_cache: Optional[TtlCache] = None,
        tracker: Optional[IncrementalTracker] = None,
    ):
        self.options = resolve_options(options)
        self._ast_cache = ast_cache
        self._segment_cache = segment_cache
        self._tracker = tracker

    def parse(self, text: str, uri: str = "") -> Document:
        if self._ast_cache is not None and uri:
            return self._ast_cache.get(uri, text)
        return ThriftParser(text).parse()

    def format_text(self, text: str, uri: str = "", dirty_range: Optional[LineRange] = None) -> str:
        return format_thrift_content(
            text,
            self.options,
            dirty_range,
            self._segment_cache,
            self.parse(text, uri),
        )

    def format_document(self, document: TextDocument) -> List[TextEdit]:
        """Edits turning the whole document into its formatted form."""
        text = document.get_text()
        dirty = None
        if self._tracker is not None and document.uri:
            dirty = self._tracker.consume_dirty_range(document.uri)
        formatted = self.format_text(text, document.uri, dirty)
        return build_minimal_edits(document, document.full_range(), text, formatted)

    def format_range(self, document: TextDocument, rng: Range) -> List[TextEdit]:
        """Edits for the constructs touching ``rng``, extended to whole constructs."""
        text = document.get_text()
        target = normalize_formatting_range(document, rng)
        segments = format_segments(
            text,
            self.options,
            cache=self._segment_cache,
            document=self.parse(text, document.uri),
        )
        touched = [s for s in segments if s.end >= target.start.line and s.start <= target.end.line]
        span = normalize_formatting_range(
            document,
            Range(Position(touched[0].start, 0), Position(touched[-1].end, 0)),
        )
        original = document.get_text(span)
        formatted = "\n".join(line for segment in touched for line in segment.lines)
        logger.debug("Range format of lines %d-%d covers lines %d-%d",
                     target.start.line, target.end.line, span.start.line, span.end.line)
        return build_minimal_edits(document, span, original, formatted)
