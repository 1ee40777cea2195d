"""String-aware text helpers shared by the parser and the formatter.

Every scanner here treats the inside of string literals as inert, so braces,
commas and comment markers inside quotes never count.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from thrift_tools.models import Range, code_point_index

from .thrift_tokenizer import split_lines

_OPENERS = "([{"
_CLOSERS = ")]}"
_GENERIC_SPACING_RE = re.compile(r"\s*([<>,])\s*")
_FIELD_ID_RE = re.compile(r"-?\d+\s*:")


def _unquoted(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (index, char) for every character outside string literals.

    Quote characters themselves are not yielded.
    """
    quote = None
    escaped = False
    for i, ch in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
            continue
        yield i, ch


def split_line_comment(text: str) -> Tuple[str, str]:
    """Split a line into (code, comment). The comment is returned stripped."""
    for i, ch in _unquoted(text):
        if ch == "#" or (ch == "/" and text[i + 1:i + 2] in ("/", "*")):
            return text[:i], text[i:].strip()
    return text, ""


def split_trailing_annotation(text: str) -> Tuple[str, str]:
    """Split off a balanced trailing ``( ... )`` group.

    Returns (base, annotation); annotation is empty when there is none.
    """
    stripped = text.rstrip()
    if not stripped.endswith(")"):
        return text, ""
    opens: List[int] = []
    group_start = None
    last = len(stripped) - 1
    for i, ch in _unquoted(stripped):
        if ch == "(":
            opens.append(i)
        elif ch == ")":
            if not opens:
                return text, ""
            start = opens.pop()
            if i == last and not opens:
                group_start = start
    if group_start is None:
        return text, ""
    return stripped[:group_start].rstrip(), stripped[group_start:]


def strip_trailing_separator(code: str) -> Tuple[str, str]:
    """Split a trailing ``,`` or ``;`` off code. Returns (code, separator)."""
    code = code.rstrip()
    if code.endswith((",", ";")):
        return code[:-1].rstrip(), code[-1]
    return code, ""


def normalize_type(text: str) -> str:
    """Remove whitespace around ``<``, ``>`` and ``,`` at any nesting depth."""
    return _GENERIC_SPACING_RE.sub(r"\1", text.strip())


def split_separated_parts(text: str) -> List[Tuple[str, str]]:
    """Split on top-level ``,``/``;``, keeping each part's separator.

    Separators nested in ``<>``, ``()``, ``[]``, ``{}`` or strings do not split.
    Empty parts are dropped. Angle brackets are counted per bracket level, so
    a stray ``>`` never closes an open ``(`` and a stray ``<`` ends with it.
    """
    parts: List[Tuple[str, str]] = []
    depth = 0
    angles = 0
    outer_angles: List[int] = []
    start = 0
    for i, ch in _unquoted(text):
        if ch == "<":
            angles += 1
        elif ch == ">":
            angles = max(0, angles - 1)
        elif ch in _OPENERS:
            depth += 1
            outer_angles.append(angles)
            angles = 0
        elif ch in _CLOSERS:
            if outer_angles:
                depth -= 1
                angles = outer_angles.pop()
        elif ch in ",;" and depth == 0 and angles == 0:
            part = text[start:i].strip()
            if part:
                parts.append((part, ch))
            start = i + 1
    tail = text[start:].strip()
    if tail:
        parts.append((tail, ""))
    return parts


def split_field_runs(text: str) -> List[str]:
    """Split ``1: i32 a 2: string b`` into one chunk per field id.

    A new chunk starts at a top-level ``id:`` preceded by whitespace; ids
    inside brackets, generics or strings are left alone.
    """
    starts = [0]
    depth = 0
    for i, ch in _unquoted(text):
        if ch in _OPENERS or ch == "<":
            depth += 1
        elif ch in _CLOSERS or ch == ">":
            depth = max(0, depth - 1)
        elif depth == 0 and i > 0 and text[i - 1].isspace() and _FIELD_ID_RE.match(text, i):
            starts.append(i)
    starts.append(len(text))
    chunks = [text[a:b].strip() for a, b in zip(starts, starts[1:])]
    return [chunk for chunk in chunks if chunk]


def split_top_level_parts(text: str) -> List[str]:
    return [part for part, _ in split_separated_parts(text)]


def scan_brackets(code: str, depth: int = 0) -> Tuple[int, Optional[int]]:
    """Track ``([{``/``)]}`` depth across code that has no comment in it.

    Returns (depth, close_index). close_index is the position of the bracket
    that took the depth below zero, i.e. closed an enclosing block; scanning
    stops there.
    """
    for i, ch in _unquoted(code):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth < 0:
                return depth, i
    return depth, None


def find_unquoted(text: str, char: str) -> int:
    """Index of the first ``char`` outside strings, or -1."""
    for i, ch in _unquoted(text):
        if ch == char:
            return i
    return -1


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace outside string literals to one space."""
    out: List[str] = []
    quote = None
    escaped = False
    for ch in text:
        if quote:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch.isspace():
            if out and out[-1] == " ":
                continue
            ch = " "
        out.append(ch)
    return "".join(out)


def _drop_trailing_spaces(out: List[str]) -> None:
    while out and out[-1] in (" ", "\t"):
        out.pop()


def _skip_spaces(text: str, i: int) -> int:
    while i < len(text) and text[i] in (" ", "\t"):
        i += 1
    return i


def normalize_generics(code: str) -> str:
    """Tighten spacing inside generic brackets of a signature or type.

    ``list < map < string , i32 > > ids`` becomes ``list<map<string,i32>> ids``.
    A space after ``>`` survives unless ``,``, ``>`` or ``)`` follows it.
    """
    out: List[str] = []
    depth = 0
    quote = None
    escaped = False
    i = 0
    n = len(code)
    while i < n:
        ch = code[i]
        if quote:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            i += 1
            continue
        if ch in ("'", '"'):
            quote = ch
            out.append(ch)
            i += 1
            continue
        if ch == "<":
            _drop_trailing_spaces(out)
            out.append(ch)
            depth += 1
            i = _skip_spaces(code, i + 1)
            continue
        if ch == "," and depth > 0:
            _drop_trailing_spaces(out)
            out.append(ch)
            i = _skip_spaces(code, i + 1)
            continue
        if ch == ">" and depth > 0:
            _drop_trailing_spaces(out)
            out.append(ch)
            depth -= 1
            j = _skip_spaces(code, i + 1)
            i = j if j >= n or code[j] in ",>)" else i + 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def normalize_signature(text: str) -> str:
    """Normalize a declaration line: generics, whitespace runs, comment spacing."""
    code, comment = split_line_comment(text)
    code = collapse_whitespace(normalize_generics(code)).strip()
    if code and comment:
        return f"{code} {comment}"
    return code or comment


def slice_text_by_range(text: str, rng: Range) -> str:
    """Return the source substring covered by a Range (UTF-16 columns)."""
    lines = split_lines(text)
    start_line, end_line = rng.start.line, rng.end.line
    if start_line >= len(lines):
        return ""
    end_line = min(end_line, len(lines) - 1)
    start = code_point_index(lines[start_line], rng.start.character)
    end = code_point_index(lines[end_line], rng.end.character)
    if start_line == end_line:
        return lines[start_line][start:end]
    chunks = [lines[start_line][start:]]
    chunks.extend(lines[start_line + 1:end_line])
    chunks.append(lines[end_line][:end])
    return "\n".join(chunks)
