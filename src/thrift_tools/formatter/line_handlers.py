"""Line classification and the small per-line formatting rules."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from thrift_tools.parser.text_utils import (
    collapse_whitespace,
    normalize_generics,
    normalize_signature,
    split_line_comment,
    split_separated_parts,
)

STRUCT_START_RE = re.compile(r"^(struct|union|exception)\b")
ENUM_START_RE = re.compile(r"^(enum|senum)\b")
SERVICE_START_RE = re.compile(r"^service\b")
CONST_START_RE = re.compile(r"^const\b")
DECLARATION_RE = re.compile(r"^(typedef|namespace|include|cpp_include)\b")
BARE_ENUM_MEMBER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\s*(\(|$)")


def is_line_comment(text: str) -> bool:
    return text.startswith(("//", "#"))


def is_block_comment_start(text: str) -> bool:
    return text.startswith("/*")


def block_comment_end(lines: List[str], start: int) -> Tuple[int, int]:
    """Find where the block comment opened on ``lines[start]`` closes.

    Returns (line index, column just past ``*/``). An unterminated comment
    runs to the last line.
    """
    first = lines[start].strip()
    close = first.find("*/", 2)
    if close >= 0:
        return start, close + 2
    for i in range(start + 1, len(lines)):
        close = lines[i].strip().find("*/")
        if close >= 0:
            return i, close + 2
    last = len(lines) - 1
    return last, len(lines[last].strip())


def format_header(code: str) -> str:
    """``struct   Foo`` -> ``struct Foo``; generics tightened."""
    return collapse_whitespace(normalize_generics(code)).strip()


def open_brace_line(header: str, comment: str) -> str:
    line = f"{header} {{" if header else "{"
    return f"{line} {comment}" if comment else line


def closing_line(after: str, comment: str) -> Tuple[str, str]:
    """Build the ``}`` line of a construct from the text that followed it.

    Returns (line, remainder); remainder is code that must be formatted as a
    line of its own, e.g. a second declaration written on the same line.
    """
    line = "}"
    after = after.strip()
    if after[:1] in (";", ","):
        line += after[0]
        after = after[1:].strip()
    if after.startswith("("):
        line = f"{line} {collapse_whitespace(after)}"
        after = ""
    if after:
        return line, f"{after} {comment}".strip()
    return (f"{line} {comment}" if comment else line), ""


def service_member_lines(text: str) -> List[str]:
    """One service body line becomes one or more function lines.

    Several functions written on one line (inline service bodies) are split
    at their top-level separators.
    """
    code, comment = split_line_comment(text)
    parts = split_separated_parts(code)
    if len(parts) < 2 or not all("(" in part for part, _ in parts):
        return [normalize_signature(text)]
    lines = [normalize_signature(part) + sep for part, sep in parts]
    if comment:
        lines[-1] = f"{lines[-1]} {comment}"
    return lines


def is_closer(code: str) -> bool:
    return code.lstrip()[:1] in (")", "]", "}")


def declaration_line(text: str) -> Optional[str]:
    """Normalized typedef/namespace/include line, or None for anything else."""
    if DECLARATION_RE.match(text):
        return normalize_signature(text)
    return None
