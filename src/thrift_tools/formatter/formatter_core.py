"""Line-oriented re-printer for Thrift documents.

The document is cut into segments along top-level construct boundaries taken
from the AST index. Each segment is re-printed on its own by a LineFormatter
walk that starts idle at indent level 0, so the output of a segment depends
only on its text and the options. Incremental mode relies on this: segments
outside the dirty range are looked up in the segment cache instead of being
re-printed, and the joined result equals a full run.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Hashable, List, Optional, Protocol, Tuple

from thrift_tools.models import LineRange
from thrift_tools.parser.text_utils import (
    find_unquoted,
    normalize_signature,
    scan_brackets,
    split_line_comment,
    split_field_runs,
    split_separated_parts,
)
from thrift_tools.parser.thrift_ast import Document, NodeType
from thrift_tools.parser.thrift_parser import ThriftParser
from thrift_tools.parser.thrift_tokenizer import split_lines

from .ast_index import AstIndex, build_ast_index
from .comment_format import format_block_comment
from .const_format import format_const_fields
from .field_format import format_enum_fields, format_struct_fields
from .field_parser import (
    ConstField,
    EnumField,
    StructField,
    is_enum_field_text,
    is_struct_field_text,
    parse_const_field_text,
    parse_enum_field_text,
    parse_struct_field_text,
)
from .line_handlers import (
    BARE_ENUM_MEMBER_RE,
    CONST_START_RE,
    ENUM_START_RE,
    SERVICE_START_RE,
    STRUCT_START_RE,
    block_comment_end,
    closing_line,
    declaration_line,
    format_header,
    is_block_comment_start,
    is_closer,
    is_line_comment,
    open_brace_line,
    service_member_lines,
)
from .options import FormattingOptions, OptionsLike, resolve_options

logger = logging.getLogger(__name__)


class WalkState(enum.Enum):
    IDLE = enum.auto()
    STRUCT = enum.auto()
    ENUM = enum.auto()
    SERVICE = enum.auto()


_CONSTRUCT_STARTS = (
    (STRUCT_START_RE, WalkState.STRUCT),
    (ENUM_START_RE, WalkState.ENUM),
    (SERVICE_START_RE, WalkState.SERVICE),
)


class SegmentCache(Protocol):
    def get(self, key: Hashable) -> Optional[Tuple[str, ...]]: ...

    def set(self, key: Hashable, value: Tuple[str, ...]) -> None: ...


class LineFormatter:
    """Re-prints a run of lines, one construct body at a time.

    ``index`` lets member lines already recognized by the parser skip the
    textual pre-checks; ``first_line`` is the document line of ``lines[0]``.
    """

    def __init__(self, options: FormattingOptions, index: Optional[AstIndex] = None, first_line: int = 0):
        self._options = options
        self._index = index or AstIndex()
        self._first_line = first_line
        self._out: List[str] = []
        self._state = WalkState.IDLE
        self._awaiting_brace = False
        self._depth = 0
        self._struct_fields: List[StructField] = []
        self._enum_fields: List[EnumField] = []

    def format_lines(self, lines: List[str]) -> List[str]:
        stripped = [line.strip() for line in lines]
        i = 0
        while i < len(stripped):
            i = self._process(stripped, i)
        self._flush_members()
        return self._out

    # -- dispatch --

    def _process(self, lines: List[str], i: int) -> int:
        text = lines[i]
        if is_block_comment_start(text):
            return self._block_comment(lines, i)
        if self._state is WalkState.IDLE and CONST_START_RE.match(text):
            return self._const_block(lines, i)
        self._process_text(text, self._first_line + i)
        return i + 1

    def _process_text(self, text: str, line_no: Optional[int]) -> None:
        if not text or is_line_comment(text):
            self._flush_members()
            self._emit(self._level(), text)
        elif self._state is WalkState.IDLE:
            self._idle_line(text)
        else:
            self._body_line(text, line_no)

    def _level(self) -> int:
        if self._state is WalkState.IDLE or self._awaiting_brace:
            return 0
        return 1 + self._depth

    # -- comments and consts --

    def _block_comment(self, lines: List[str], i: int) -> int:
        end, column = block_comment_end(lines, i)
        chunk = lines[i:end + 1]
        remainder = chunk[-1][column:].strip()
        chunk[-1] = chunk[-1][:column]
        self._flush_members()
        indent = self._options.indent(self._level())
        self._out.extend(line.rstrip() for line in format_block_comment(chunk, indent))
        if remainder:
            self._process_text(remainder, self._first_line + end)
        return end + 1

    def _const_block(self, lines: List[str], i: int) -> int:
        statements = []
        j = i
        while j < len(lines) and CONST_START_RE.match(lines[j]):
            end = _statement_end(lines, j)
            statements.append(lines[j:end + 1])
            j = end + 1
        self._emit_consts(statements)
        return j

    def _emit_consts(self, statements: List[List[str]]) -> None:
        block: List[ConstField] = []
        for statement in statements:
            parsed = parse_const_field_text("\n".join(statement))
            if parsed is not None:
                block.append(parsed)
                continue
            self._out.extend(format_const_fields(block, self._options))
            block = []
            for line in statement:
                self._emit(0, line)
        self._out.extend(format_const_fields(block, self._options))

    # -- top level --

    def _idle_line(self, text: str) -> None:
        for pattern, state in _CONSTRUCT_STARTS:
            if pattern.match(text):
                self._open_construct(state, text)
                return
        if CONST_START_RE.match(text):
            self._emit_consts([[text]])
            return
        declaration = declaration_line(text)
        self._emit(0, declaration if declaration is not None else text)

    def _open_construct(self, state: WalkState, text: str) -> None:
        code, comment = split_line_comment(text)
        brace = find_unquoted(code, "{")
        self._state = state
        self._depth = 0
        if brace < 0:
            self._awaiting_brace = True
            self._emit(0, normalize_signature(text))
            return
        self._open_body(format_header(code[:brace]), code[brace + 1:], comment)

    def _open_body(self, header: str, rest: str, comment: str) -> None:
        if not rest.strip():
            self._emit(0, open_brace_line(header, comment))
            return
        self._emit(0, open_brace_line(header, ""))
        self._body_line(f"{rest.strip()} {comment}".strip(), None)

    # -- construct bodies --

    def _body_line(self, text: str, line_no: Optional[int]) -> None:
        if self._awaiting_brace:
            self._awaiting_brace = False
            if text.startswith("{"):
                code, comment = split_line_comment(text[1:])
                self._open_body("", code, comment)
                return

        code, comment = split_line_comment(text)
        depth, close = scan_brackets(code, self._depth)
        if close is not None:
            before = code[:close].strip()
            if before and self._depth > 0:
                self._continuation(before, 0)
            elif before:
                self._member_line(before, line_no)
            self._close_construct(code[close + 1:], comment)
        elif self._depth == 0 and depth == 0:
            self._member_line(text, line_no)
        else:
            self._continuation(text, depth)

    def _continuation(self, text: str, new_depth: int) -> None:
        """A line of a member spanning several lines, indented by bracket depth."""
        self._flush_members()
        level = 1 + self._depth - (1 if is_closer(text) else 0)
        line = normalize_signature(text) if self._state is WalkState.SERVICE else text
        self._emit(max(level, 1), line)
        self._depth = max(new_depth, 0)

    def _member_line(self, text: str, line_no: Optional[int]) -> None:
        if self._state is WalkState.SERVICE:
            self._flush_members()
            for line in service_member_lines(text):
                self._emit(1, line)
            return
        members = self._parse_members(text, line_no)
        if members is None:
            self._flush_members()
            self._emit(1, text)
        elif self._state is WalkState.STRUCT:
            self._struct_fields.extend(members)
        else:
            self._enum_fields.extend(members)

    def _parse_members(self, text: str, line_no: Optional[int]):
        """Struct fields or enum members on one line, or None if any part fails."""
        code, comment = split_line_comment(text)
        parts = split_separated_parts(code)
        if self._state is WalkState.STRUCT:
            parts = _split_field_parts(parts)
        if not parts:
            return None
        single = len(parts) == 1
        members = []
        for part, sep in parts:
            if self._state is WalkState.STRUCT:
                known = single and line_no in self._index.struct_field_index
                member = parse_struct_field_text(part + sep) if known or is_struct_field_text(part) else None
            else:
                known = single and line_no in self._index.enum_member_index
                plausible = known or is_enum_field_text(part) or BARE_ENUM_MEMBER_RE.match(part)
                member = parse_enum_field_text(part + sep) if plausible else None
            if member is None:
                return None
            members.append(member)
        if comment:
            members[-1].comment = comment
        return members

    def _close_construct(self, after: str, comment: str) -> None:
        self._flush_members()
        self._state = WalkState.IDLE
        self._depth = 0
        self._awaiting_brace = False
        line, remainder = closing_line(after, comment)
        self._emit(0, line)
        if remainder:
            self._process_text(remainder, None)

    def _flush_members(self) -> None:
        if self._struct_fields:
            self._out.extend(format_struct_fields(self._struct_fields, self._options, 1))
            self._struct_fields = []
        if self._enum_fields:
            self._out.extend(format_enum_fields(self._enum_fields, self._options, 1))
            self._enum_fields = []

    def _emit(self, level: int, text: str) -> None:
        self._out.append((self._options.indent(level) + text).rstrip() if text else "")


def _split_field_parts(parts: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Break parts holding several unseparated fields apart; the separator stays last."""
    result = []
    for part, sep in parts:
        chunks = split_field_runs(part)
        result.extend((chunk, "") for chunk in chunks[:-1])
        result.append((chunks[-1], sep))
    return result


def _statement_end(lines: List[str], start: int) -> int:
    """Last line of the statement starting at ``start``: where brackets balance."""
    depth = 0
    for i in range(start, len(lines)):
        code, _ = split_line_comment(lines[i])
        depth, close = scan_brackets(code, depth)
        if close is not None or depth <= 0:
            return i
    return len(lines) - 1


# -- segments --


@dataclass
class Segment:
    """Inclusive line span formatted as one unit."""

    start: int
    end: int
    verbatim: bool = False
    node_type: Optional[NodeType] = None


@dataclass(frozen=True)
class FormattedSegment:
    start: int
    end: int
    lines: Tuple[str, ...]


def build_segments(line_count: int, index: AstIndex) -> List[Segment]:
    """Cut a document into construct segments and the gaps between them.

    Overlapping construct spans merge, and so do const statements on
    directly adjacent lines since they align as one block. A segment holding
    an Invalid node is marked verbatim.
    """
    constructs: List[Segment] = []
    last_line = max(line_count - 1, 0)
    for span in index.spans:
        start = min(max(span.start, 0), last_line)
        end = min(max(span.end, start), last_line)
        invalid = span.node_type == NodeType.INVALID
        if constructs:
            last = constructs[-1]
            const_run = (
                span.node_type == NodeType.CONST
                and last.node_type == NodeType.CONST
                and start == last.end + 1
            )
            if start <= last.end or const_run:
                last.end = max(last.end, end)
                last.verbatim = last.verbatim or invalid
                if last.node_type != span.node_type:
                    last.node_type = None
                continue
        constructs.append(Segment(start, end, invalid, span.node_type))

    segments: List[Segment] = []
    line = 0
    for construct in constructs:
        if construct.start > line:
            segments.append(Segment(line, construct.start - 1))
        segments.append(construct)
        line = construct.end + 1
    if line < line_count:
        segments.append(Segment(line, line_count - 1))
    return segments


def _format_segment(
    segment: Segment,
    source: List[str],
    options: FormattingOptions,
    index: AstIndex,
) -> Tuple[str, ...]:
    if segment.verbatim:
        return tuple(line.rstrip() for line in source)
    return tuple(LineFormatter(options, index, segment.start).format_lines(source))


def _resolve_dirty_range(
    dirty_range: Optional[LineRange],
    options: FormattingOptions,
    line_count: int,
) -> Optional[LineRange]:
    if dirty_range is None or not options.incremental_formatting_enabled:
        return None
    if dirty_range.start < 0 or dirty_range.end > line_count or dirty_range.start >= dirty_range.end:
        logger.debug("Dirty range %s does not fit %d lines, formatting everything", dirty_range, line_count)
        return None
    if dirty_range.line_count > options.max_dirty_lines:
        logger.debug(
            "Dirty range of %d lines is over the %d line limit, formatting everything",
            dirty_range.line_count,
            options.max_dirty_lines,
        )
        return None
    return dirty_range


def format_segments(
    text: str,
    options: OptionsLike = None,
    dirty_range: Optional[LineRange] = None,
    cache: Optional[SegmentCache] = None,
    document: Optional[Document] = None,
) -> List[FormattedSegment]:
    """Format ``text`` segment by segment.

    With an accepted dirty range, segments that do not touch it are taken
    from ``cache`` when present there. Every segment formatted here is
    stored in ``cache``.
    """
    opts = resolve_options(options)
    lines = split_lines(text)
    if document is None:
        document = ThriftParser(text).parse()
    index = build_ast_index(document)
    dirty = _resolve_dirty_range(dirty_range, opts, len(lines))

    results: List[FormattedSegment] = []
    reused = 0
    for segment in build_segments(len(lines), index):
        source = lines[segment.start:segment.end + 1]
        key = (opts, segment.verbatim, tuple(source))
        formatted = None
        if dirty is not None and cache is not None and not dirty.overlaps(segment.start, segment.end):
            formatted = cache.get(key)
            if formatted is not None:
                reused += 1
        if formatted is None:
            formatted = _format_segment(segment, source, opts, index)
            if cache is not None:
                cache.set(key, formatted)
        results.append(FormattedSegment(segment.start, segment.end, formatted))

    if dirty is not None:
        logger.debug("Incremental format of lines %d-%d reused %d of %d segments",
                     dirty.start, dirty.end, reused, len(results))
    return results


def format_thrift_content(
    text: str,
    options: OptionsLike = None,
    dirty_range: Optional[LineRange] = None,
    cache: Optional[SegmentCache] = None,
    document: Optional[Document] = None,
) -> str:
    """Format Thrift source text.

    ``options`` is a FormattingOptions or a mapping of option names.
    ``dirty_range`` (half-open lines) enables incremental formatting when the
    options allow it; the result is the same string a full run produces.
    """
    segments = format_segments(text, options, dirty_range, cache, document)
    return "\n".join(line for segment in segments for line in segment.lines)
