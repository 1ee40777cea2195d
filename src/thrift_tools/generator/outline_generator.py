from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from thrift_tools.parser.thrift_ast import Document, Field, Function, NodeType
from thrift_tools.parser.thrift_parser import ThriftParser

STRUCT_KINDS: Dict[NodeType, str] = {
    NodeType.STRUCT: "struct",
    NodeType.UNION: "union",
    NodeType.EXCEPTION: "exception",
}


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _field_text(field: Field) -> str:
    prefix = f"{field.id}: " if field.id is not None else ""
    return f"{prefix}{field.field_type} {field.name}"


def function_signature(function: Function) -> str:
    """One-line signature such as ``i32 add(1: i32 a, 2: i32 b) throws (1: Oops e)``."""
    args = ", ".join(_field_text(arg) for arg in function.arguments)
    signature = f"{function.return_type} {function.name}({args})"
    if function.oneway:
        signature = f"oneway {signature}"
    if function.throws:
        signature += " throws (" + ", ".join(_field_text(t) for t in function.throws) + ")"
    return signature


def _outline_context(document: Document, title: str) -> dict:
    context: dict = {
        "title": title,
        "namespaces": [],
        "includes": [],
        "typedefs": [],
        "consts": [],
        "enums": [],
        "structs": [],
        "services": [],
        "invalid": [],
    }
    for node in document.body:
        line = node.range.start.line + 1
        if node.type == NodeType.NAMESPACE:
            context["namespaces"].append({"scope": node.scope, "name": node.namespace})
        elif node.type == NodeType.INCLUDE:
            context["includes"].append(node.path)
        elif node.type == NodeType.TYPEDEF:
            context["typedefs"].append({"name": node.name, "alias_type": node.alias_type, "line": line})
        elif node.type == NodeType.CONST:
            context["consts"].append({"name": node.name, "type": node.value_type, "line": line})
        elif node.type == NodeType.ENUM:
            context["enums"].append({
                "name": node.name,
                "line": line,
                "members": [{"name": m.name, "initializer": m.initializer} for m in node.members],
            })
        elif node.type in STRUCT_KINDS:
            context["structs"].append({
                "kind": STRUCT_KINDS[node.type],
                "name": node.name,
                "line": line,
                "fields": [
                    {
                        "id": "" if f.id is None else f.id,
                        "requiredness": "" if f.requiredness.value == "none" else f.requiredness.value,
                        "type": f.field_type,
                        "name": f.name,
                        "default": f"`{f.default_value}`" if f.default_value else "",
                    }
                    for f in node.fields
                ],
            })
        elif node.type == NodeType.SERVICE:
            context["services"].append({
                "name": node.name,
                "extends": node.extends,
                "line": line,
                "functions": [{"signature": function_signature(f)} for f in node.functions],
            })
        elif node.type == NodeType.INVALID:
            context["invalid"].append({"line": line, "text": node.raw.split("\n")[0].strip()})
    return context


def generate_outline(document: Document, title: str) -> str:
    """Render a Markdown outline of a parsed Thrift document."""
    env = _get_template_env()
    template = env.get_template("outline.md.j2")
    return template.render(**_outline_context(document, title))


def generate_outlines(thrift_files: List[str], output_dir: str) -> List[str]:
    """Write ``<name>.md`` outlines for Thrift files into output_dir.

    Returns list of generated file paths.
    """
    os.makedirs(output_dir, exist_ok=True)

    generated: List[str] = []
    for thrift_file in thrift_files:
        document = ThriftParser(Path(thrift_file).read_text(encoding="utf-8")).parse()
        title = Path(thrift_file).name
        file_path = os.path.join(output_dir, f"{Path(thrift_file).stem}.md")
        Path(file_path).write_text(generate_outline(document, title), encoding="utf-8")
        generated.append(file_path)

    return generated
