"""Column alignment for blocks of struct fields and enum members."""

from __future__ import annotations

from typing import List, Sequence, Union

from .field_parser import EnumField, StructField
from .options import FormattingOptions

Member = Union[StructField, EnumField]


def apply_trailing_comma(suffix: str, policy: str) -> str:
    """Apply the trailing separator policy to one member's separator."""
    if policy == "add" and not suffix:
        return ","
    if policy == "remove" and suffix == ",":
        return ""
    return suffix


def _finish_lines(
    members: Sequence[Member],
    heads: List[str],
    options: FormattingOptions,
    indent: str,
) -> List[str]:
    """Append annotation, separator and comment columns to member heads."""
    annotated = [len(head) for head, member in zip(heads, members) if member.annotation]
    annotation_col = max(annotated) + 1 if annotated else 0

    bodies = []
    for head, member in zip(heads, members):
        body = head
        if member.annotation:
            if options.align_annotations:
                body = body.ljust(annotation_col) + member.annotation
            else:
                body = f"{body} {member.annotation}"
        bodies.append(body + apply_trailing_comma(member.suffix, options.trailing_comma))

    commented = sum(1 for member in members if member.comment)
    comment_col = max(len(body) for body in bodies) + 1
    lines = []
    for body, member in zip(bodies, members):
        if member.comment:
            if options.align_comments and commented > 1:
                body = body.ljust(comment_col) + member.comment
            else:
                body = f"{body} {member.comment}"
        lines.append((indent + body).rstrip())
    return lines


def format_struct_fields(fields: Sequence[StructField], options: FormattingOptions, level: int = 1) -> List[str]:
    """Format one contiguous block of struct fields.

    Produces ``id: [qualifier] type name [= default] [(annotation)][,] [// comment]``
    with the enabled columns padded to the widest entry of the block.
    """
    if not fields:
        return []
    id_width = max(len(f.id) for f in fields)
    qualifier_width = max(len(f.qualifier) for f in fields)
    type_width = max(len(f.type) for f in fields)
    default_name_width = max((len(f.name) for f in fields if f.default_value), default=0)

    heads = []
    for f in fields:
        head = f"{f.id}:".ljust(id_width + 1) + " "
        if options.align_types and qualifier_width:
            head += f.qualifier.ljust(qualifier_width) + " "
        elif f.qualifier:
            head += f.qualifier + " "
        head += (f.type.ljust(type_width) if options.align_types else f.type) + " "
        if f.default_value:
            align_default = options.align_field_names and options.align_struct_defaults
            name = f.name.ljust(default_name_width) if align_default else f.name
            head += f"{name} = {f.default_value}"
        else:
            head += f.name
        heads.append(head)
    return _finish_lines(fields, heads, options, options.indent(level))


def format_enum_fields(fields: Sequence[EnumField], options: FormattingOptions, level: int = 1) -> List[str]:
    """Format one contiguous block of enum members."""
    if not fields:
        return []
    name_width = max((len(f.name) for f in fields if f.value), default=0)

    heads = []
    for f in fields:
        if not f.value:
            heads.append(f.name)
        elif options.align_enum_equals or options.align_enum_names:
            heads.append(f"{f.name.ljust(name_width)} = {f.value}")
        elif options.align_enum_values:
            heads.append(f"{(f.name + ' =').ljust(name_width + 2)} {f.value}")
        else:
            heads.append(f"{f.name} = {f.value}")
    return _finish_lines(fields, heads, options, options.indent(level))
