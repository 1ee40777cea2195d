"""Line-based lookup tables over a parsed document."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from thrift_tools.parser.thrift_ast import Document, EnumMember, Field, NodeType

_STRUCT_TYPES = (NodeType.STRUCT, NodeType.UNION, NodeType.EXCEPTION)


@dataclass
class ConstructSpan:
    """Inclusive line span of one top-level node."""

    start: int
    end: int
    node_type: NodeType


@dataclass
class AstIndex:
    const_starts: Set[int] = field(default_factory=set)
    struct_starts: Set[int] = field(default_factory=set)
    enum_starts: Set[int] = field(default_factory=set)
    service_starts: Set[int] = field(default_factory=set)
    struct_field_index: Dict[int, Field] = field(default_factory=dict)
    enum_member_index: Dict[int, EnumMember] = field(default_factory=dict)
    spans: List[ConstructSpan] = field(default_factory=list)

    def constructs_overlapping(self, start: int, end: int) -> List[ConstructSpan]:
        """Spans touching the half-open line interval [start, end)."""
        return [span for span in self.spans if span.start < end and span.end >= start]


def _index_by_line(target: Dict[int, object], members: Iterable) -> None:
    """Map line -> member for lines that hold exactly one member."""
    members = list(members)
    counts = Counter(member.range.start.line for member in members)
    for member in members:
        line = member.range.start.line
        if counts[line] == 1:
            target[line] = member


def build_ast_index(document: Document) -> AstIndex:
    index = AstIndex()
    for node in document.body:
        start = node.range.start.line
        index.spans.append(ConstructSpan(start, node.range.end.line, node.type))
        if node.type == NodeType.CONST:
            index.const_starts.add(start)
        elif node.type in _STRUCT_TYPES:
            index.struct_starts.add(start)
            _index_by_line(index.struct_field_index, node.fields)
        elif node.type == NodeType.ENUM:
            index.enum_starts.add(start)
            _index_by_line(index.enum_member_index, node.members)
        elif node.type == NodeType.SERVICE:
            index.service_starts.add(start)
    index.spans.sort(key=lambda span: (span.start, span.end))
    return index
