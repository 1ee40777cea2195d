"""Alignment of const blocks and layout of multi-line const values."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence, Tuple

from thrift_tools.parser.text_utils import scan_brackets, split_line_comment, split_top_level_parts

from .field_parser import ConstField
from .options import FormattingOptions

_PAIRS = {"[": "]", "{": "}"}


def _is_inline_collection(value: str) -> bool:
    """True for ``[...]`` or ``{...}`` whose first bracket closes at the end."""
    if len(value) < 2 or value[0] not in _PAIRS or value[-1] != _PAIRS[value[0]]:
        return False
    _, close = scan_brackets(value[1:])
    return close == len(value) - 2


def expand_collection(field: ConstField, options: FormattingOptions, level: int = 0) -> ConstField:
    """Put each item of an inline list/map value on its own line.

    ``multiline`` always expands; ``auto`` only when the single-line form is
    longer than ``max_line_length``.
    """
    if options.collection_style == "preserve" or field.is_multiline:
        return field
    value = field.value_lines[0]
    if not _is_inline_collection(value):
        return field
    if options.collection_style == "auto":
        line = f"{options.indent(level)}const {field.type} {field.name} = {value}{field.suffix}"
        if field.comment:
            line += f" {field.comment}"
        if options.display_width(line) <= options.max_line_length:
            return field
    items = split_top_level_parts(value[1:-1])
    if not items:
        return field
    lines = [value[0]] + [f"{item}," for item in items[:-1]] + [items[-1], value[-1]]
    return replace(field, value_lines=lines)


def _value_tail(field: ConstField, options: FormattingOptions, level: int) -> List[str]:
    """Lines after the first of a multi-line value, indented by bracket depth."""
    depth, _ = scan_brackets(split_line_comment(field.value_lines[0])[0])
    entries: List[Tuple[str, str, str]] = []
    tail = field.value_lines[1:]
    for i, line in enumerate(tail):
        code, comment = split_line_comment(line)
        code = code.strip()
        if i == len(tail) - 1:
            code += field.suffix
        line_level = level + max(depth, 0)
        if code[:1] in (")", "]", "}"):
            line_level -= 1
        depth, _ = scan_brackets(code, depth)
        entries.append((options.indent(max(line_level, level)), code, comment))

    commented = [len(indent + code) for indent, code, comment in entries if code and comment]
    comment_col = max(commented) + 1 if commented else 0
    out = []
    for indent, code, comment in entries:
        if not code:
            out.append((indent + comment) if comment else "")
        elif comment and options.align_comments:
            out.append((indent + code).ljust(comment_col) + comment)
        elif comment:
            out.append(f"{indent}{code} {comment}")
        else:
            out.append(indent + code)
    return out


def format_const_fields(fields: Sequence[ConstField], options: FormattingOptions, level: int = 0) -> List[str]:
    """Format one block of consecutive const statements."""
    if not fields:
        return []
    fields = [expand_collection(f, options, level) for f in fields]
    type_width = max(len(f.type) for f in fields)
    name_width = max(len(f.name) for f in fields)

    heads = []
    for f in fields:
        type_text = f.type.ljust(type_width) if options.align_types else f.type
        name_text = f.name.ljust(name_width) if options.align_field_names else f.name
        head = f"const {type_text} {name_text} = {f.value_lines[0]}"
        if not f.is_multiline:
            head += f.suffix
        heads.append(head)

    commented = [len(head) for head, f in zip(heads, fields) if f.comment]
    comment_col = max(commented) + 1 if commented else 0
    indent = options.indent(level)
    lines = []
    for head, f in zip(heads, fields):
        if f.comment:
            head = head.ljust(comment_col) + f.comment if options.align_comments else f"{head} {f.comment}"
        lines.append((indent + head).rstrip())
        if f.is_multiline:
            lines.extend(_value_tail(f, options, level))
    return lines
