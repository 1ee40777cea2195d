"""AST node definitions for Thrift IDL documents."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union

from thrift_tools.models import Range


class NodeType(enum.Enum):
    DOCUMENT = "Document"
    NAMESPACE = "Namespace"
    INCLUDE = "Include"
    TYPEDEF = "Typedef"
    CONST = "Const"
    ENUM = "Enum"
    ENUM_MEMBER = "EnumMember"
    STRUCT = "Struct"
    UNION = "Union"
    EXCEPTION = "Exception"
    SERVICE = "Service"
    FUNCTION = "Function"
    FIELD = "Field"
    INVALID = "Invalid"


class Requiredness(enum.Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    NONE = "none"


@dataclass
class Field:
    """A struct field, function argument or throws entry:
    [id:] [required|optional] type name [= default] [(annotation)]"""

    id: Optional[int]
    requiredness: Requiredness
    field_type: str
    type_range: Range
    name: str
    name_range: Range
    range: Range
    default_value: Optional[str] = None
    default_value_range: Optional[Range] = None
    annotation: Optional[str] = None
    type: NodeType = field(default=NodeType.FIELD, init=False)


@dataclass
class Namespace:
    scope: str
    namespace: str
    name_range: Range
    range: Range
    type: NodeType = field(default=NodeType.NAMESPACE, init=False)

    @property
    def name(self) -> str:
        return self.namespace


@dataclass
class Include:
    path: str
    path_range: Range
    range: Range
    cpp: bool = False
    type: NodeType = field(default=NodeType.INCLUDE, init=False)


@dataclass
class Typedef:
    name: str
    name_range: Range
    alias_type: str
    alias_type_range: Range
    range: Range
    type: NodeType = field(default=NodeType.TYPEDEF, init=False)


@dataclass
class Const:
    name: str
    name_range: Range
    value_type: str
    value_type_range: Range
    value: str
    value_range: Range
    range: Range
    type: NodeType = field(default=NodeType.CONST, init=False)


@dataclass
class EnumMember:
    name: str
    name_range: Range
    range: Range
    initializer: Optional[str] = None
    initializer_range: Optional[Range] = None
    type: NodeType = field(default=NodeType.ENUM_MEMBER, init=False)


@dataclass
class Enum:
    name: str
    name_range: Range
    range: Range
    members: List[EnumMember] = field(default_factory=list)
    type: NodeType = field(default=NodeType.ENUM, init=False)


@dataclass
class Struct:
    """struct, union and exception declarations; told apart by ``type``."""

    name: str
    name_range: Range
    range: Range
    fields: List[Field] = field(default_factory=list)
    type: NodeType = NodeType.STRUCT


@dataclass
class Function:
    name: str
    name_range: Range
    return_type: str
    return_type_range: Range
    range: Range
    oneway: bool = False
    arguments: List[Field] = field(default_factory=list)
    throws: List[Field] = field(default_factory=list)
    type: NodeType = field(default=NodeType.FUNCTION, init=False)


@dataclass
class Service:
    name: str
    name_range: Range
    range: Range
    extends: Optional[str] = None
    extends_range: Optional[Range] = None
    functions: List[Function] = field(default_factory=list)
    type: NodeType = field(default=NodeType.SERVICE, init=False)


@dataclass
class Invalid:
    """A declaration that could not be parsed; keeps the original text."""

    raw: str
    range: Range
    type: NodeType = field(default=NodeType.INVALID, init=False)


Node = Union[Namespace, Include, Typedef, Const, Enum, Struct, Service, Invalid]


@dataclass
class Document:
    """Top-level parsed representation of a Thrift file."""

    range: Range
    body: List[Node] = field(default_factory=list)
    type: NodeType = field(default=NodeType.DOCUMENT, init=False)
