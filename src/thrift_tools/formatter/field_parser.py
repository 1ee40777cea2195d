"""Decompose single declarations (struct field, enum member, const) from text.

Every parser returns None when the text does not have the expected shape;
callers then keep the line as it was.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from thrift_tools.parser.text_utils import (
    find_unquoted,
    normalize_type,
    split_line_comment,
    split_trailing_annotation,
    strip_trailing_separator,
)

_STRUCT_FIELD_RE = re.compile(r"^(-?\d+)\s*:\s*(?:(required|optional)\s+)?(.*)$", re.S)
_STRUCT_FIELD_CHECK_RE = re.compile(r"^\s*-?\d+\s*:\s*\S")
_ENUM_FIELD_CHECK_RE = re.compile(r"^\s*[A-Za-z_][A-Za-z0-9_]*\s*=\s*[-+]?(?:0[xX][0-9a-fA-F]+|\d+)")
_ENUM_MEMBER_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*(?:=\s*(\S.*))?$", re.S)
_TYPE_AND_NAME_RE = re.compile(r"^(.*?)([A-Za-z_][A-Za-z0-9_]*)$", re.S)
_CONST_RE = re.compile(r"^const\s+(.+?)\s*\b([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")
_WHITESPACE_RE = re.compile(r"\s")


@dataclass
class StructField:
    id: str
    qualifier: str
    type: str
    name: str
    default_value: str = ""
    annotation: str = ""
    suffix: str = ""
    comment: str = ""


@dataclass
class EnumField:
    name: str
    value: str = ""
    annotation: str = ""
    suffix: str = ""
    comment: str = ""


@dataclass
class ConstField:
    type: str
    name: str
    value_lines: List[str] = field(default_factory=list)
    suffix: str = ""
    comment: str = ""

    @property
    def value(self) -> str:
        return "\n".join(self.value_lines)

    @property
    def is_multiline(self) -> bool:
        return len(self.value_lines) > 1


def is_struct_field_text(text: str) -> bool:
    """Quick check for ``<id>: ...``."""
    return bool(_STRUCT_FIELD_CHECK_RE.match(text))


def is_enum_field_text(text: str) -> bool:
    """Quick check for ``NAME = <integer>``."""
    return bool(_ENUM_FIELD_CHECK_RE.match(text))


def _split_type_and_name(text: str) -> Optional[Tuple[str, str]]:
    match = _TYPE_AND_NAME_RE.match(text)
    if not match:
        return None
    raw_type, name = match.groups()
    if not raw_type.strip() or not (raw_type[-1].isspace() or raw_type.endswith(">")):
        return None
    field_type = normalize_type(raw_type)
    if _WHITESPACE_RE.search(field_type) or field_type.count("<") != field_type.count(">"):
        return None
    return field_type, name


def parse_struct_field_text(text: str) -> Optional[StructField]:
    code, comment = split_line_comment(text.strip())
    match = _STRUCT_FIELD_RE.match(code.strip())
    if not match:
        return None
    field_id, qualifier, rest = match.groups()
    rest, suffix = strip_trailing_separator(rest)
    base, annotation = split_trailing_annotation(rest)

    default_value = ""
    equals = find_unquoted(base, "=")
    if equals >= 0:
        default_value = base[equals + 1:].strip()
        base = base[:equals]
        if not default_value:
            return None

    type_and_name = _split_type_and_name(base.strip())
    if type_and_name is None:
        return None
    field_type, name = type_and_name
    return StructField(
        id=field_id,
        qualifier=qualifier or "",
        type=field_type,
        name=name,
        default_value=default_value,
        annotation=annotation,
        suffix=suffix,
        comment=comment,
    )


def parse_enum_field_text(text: str) -> Optional[EnumField]:
    code, comment = split_line_comment(text.strip())
    code, suffix = strip_trailing_separator(code)
    base, annotation = split_trailing_annotation(code)
    match = _ENUM_MEMBER_RE.match(base.strip())
    if not match:
        return None
    name, value = match.groups()
    return EnumField(
        name=name,
        value=(value or "").strip(),
        annotation=annotation,
        suffix=suffix,
        comment=comment,
    )


def parse_const_field_text(text: str) -> Optional[ConstField]:
    """Parse a const statement; the value may continue over several lines."""
    lines = text.strip().split("\n")
    code, comment = split_line_comment(lines[0].strip())
    match = _CONST_RE.match(code.strip())
    if not match:
        return None
    raw_type, name, first_value = match.groups()
    const_type = normalize_type(raw_type)
    if _WHITESPACE_RE.search(const_type):
        return None

    value_lines = [first_value.strip()] + [line.strip() for line in lines[1:]]
    if not value_lines[0]:
        return None
    last_code, last_comment = split_line_comment(value_lines[-1])
    last_code, suffix = strip_trailing_separator(last_code)
    if len(value_lines) == 1 and not last_code:
        return None
    value_lines[-1] = f"{last_code} {last_comment}".strip() if last_comment else last_code
    return ConstField(
        type=const_type,
        name=name,
        value_lines=value_lines,
        suffix=suffix,
        comment=comment,
    )
