"""Recursive descent parser for Thrift IDL documents.

Consumes the token stream from thrift_tokenizer and produces the AST in
thrift_ast. The parser never raises: a declaration that does not parse
becomes an Invalid node and scanning resumes at the next declaration
keyword. Malformed members inside an otherwise valid body are skipped.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, List, Optional, Tuple

from thrift_tools.models import Position, Range, utf16_column

from .text_utils import normalize_type
from .thrift_ast import (
    Const,
    Document,
    Enum,
    EnumMember,
    Field,
    Function,
    Include,
    Invalid,
    Namespace,
    Node,
    NodeType,
    Requiredness,
    Service,
    Struct,
    Typedef,
)
from .thrift_tokenizer import Token, TokenType, ThriftTokenizer, split_lines

logger = logging.getLogger(__name__)


class ConstructState(enum.Enum):
    IDLE = enum.auto()
    NAMESPACE = enum.auto()
    INCLUDE = enum.auto()
    TYPEDEF = enum.auto()
    CONST = enum.auto()
    ENUM = enum.auto()
    STRUCT = enum.auto()
    SERVICE = enum.auto()
    INVALID = enum.auto()


_CONSTRUCT_STATES: Dict[str, ConstructState] = {
    "namespace": ConstructState.NAMESPACE,
    "include": ConstructState.INCLUDE,
    "cpp_include": ConstructState.INCLUDE,
    "typedef": ConstructState.TYPEDEF,
    "const": ConstructState.CONST,
    "enum": ConstructState.ENUM,
    "struct": ConstructState.STRUCT,
    "union": ConstructState.STRUCT,
    "exception": ConstructState.STRUCT,
    "service": ConstructState.SERVICE,
}

TOP_LEVEL_KEYWORDS = frozenset(_CONSTRUCT_STATES)

_STRUCT_TYPES = {
    "struct": NodeType.STRUCT,
    "union": NodeType.UNION,
    "exception": NodeType.EXCEPTION,
}

_SEPARATORS = (",", ";")


class ThriftParseError(Exception):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, token: Token | None = None):
        if token:
            super().__init__(f"Line {token.line + 1}:{token.start + 1}: {message}")
        else:
            super().__init__(message)
        self.token = token


class ThriftParser:
    """Recursive descent parser for .thrift documents.

    ``content`` is either the source text or an object with ``get_text()``
    such as TextDocument.
    """

    def __init__(self, content):
        text = content if isinstance(content, str) else content.get_text()
        self._lines = split_lines(text)
        self._tokens = [
            tok
            for tok in ThriftTokenizer().tokenize_lines(self._lines)
            if tok.type not in (TokenType.WHITESPACE, TokenType.COMMENT)
        ]
        last_line = len(self._lines) - 1
        self._tokens.append(Token(TokenType.EOF, "", len(self._lines[last_line]), len(self._lines[last_line]), last_line))
        self._pos = 0
        self.state = ConstructState.IDLE

    # -- public API --

    def parse(self) -> Document:
        """Parse the full token stream into a Document AST."""
        body: List[Node] = []

        while not self._at_end():
            tok = self._peek()
            if self._is_keyword(tok):
                body.append(self._parse_declaration())
            else:
                logger.debug("Skipping stray input at line %d: %r", tok.line + 1, tok.value)
                self._skip_line(tok.line)
            self.state = ConstructState.IDLE

        last_line = len(self._lines) - 1
        doc_range = Range(Position(0, 0), self._position(last_line, len(self._lines[last_line])))
        return Document(range=doc_range, body=body)

    # -- declarations --

    def _parse_declaration(self) -> Node:
        start = self._pos
        keyword = self._peek().value
        self.state = _CONSTRUCT_STATES[keyword]
        handler = self._handlers()[keyword]
        try:
            return handler()
        except ThriftParseError as exc:
            logger.debug("Invalid %s declaration: %s", keyword, exc)
            self.state = ConstructState.INVALID
            self._pos = start + 1
            while not self._at_end() and not self._is_keyword(self._peek()):
                self._advance()
            return self._invalid(start, self._pos - 1)

    def _handlers(self) -> Dict[str, Callable[[], Node]]:
        return {
            "namespace": self._parse_namespace,
            "include": self._parse_include,
            "cpp_include": self._parse_include,
            "typedef": self._parse_typedef,
            "const": self._parse_const,
            "enum": self._parse_enum,
            "struct": self._parse_struct,
            "union": self._parse_struct,
            "exception": self._parse_struct,
            "service": self._parse_service,
        }

    def _parse_namespace(self) -> Namespace:
        """Parse: namespace (scope | *) qualified_name"""
        keyword = self._advance()
        if self._is_symbol(self._peek(), "*"):
            scope = self._advance().value
        else:
            scope, _, _ = self._parse_qualified_name()
        name, first, last = self._parse_qualified_name()
        self._skip_separator()
        return Namespace(
            scope=scope,
            namespace=name,
            name_range=self._span(first, last),
            range=self._span(keyword, last),
        )

    def _parse_include(self) -> Include:
        """Parse: (include | cpp_include) "path" """
        keyword = self._advance()
        path_tok = self._peek()
        if path_tok.type != TokenType.STRING:
            raise ThriftParseError("Expected include path string", path_tok)
        self._advance()
        self._skip_separator()
        return Include(
            path=path_tok.value,
            path_range=self._span(path_tok, path_tok),
            range=self._span(keyword, path_tok),
            cpp=keyword.value == "cpp_include",
        )

    def _parse_typedef(self) -> Typedef:
        """Parse: typedef type name [annotation]"""
        keyword = self._advance()
        type_first, type_last = self._parse_type()
        self._parse_annotation()
        name_tok = self._expect_identifier()
        annotation = self._parse_annotation()
        self._skip_separator()
        return Typedef(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            alias_type=normalize_type(self._source(type_first, type_last)),
            alias_type_range=self._span(type_first, type_last),
            range=self._span(keyword, annotation[1] if annotation else name_tok),
        )

    def _parse_const(self) -> Const:
        """Parse: const type name = value"""
        keyword = self._advance()
        type_first, type_last = self._parse_type()
        name_tok = self._expect_identifier()
        self._expect_symbol("=")
        value_first, value_last = self._parse_const_value()
        self._skip_separator()
        return Const(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            value_type=normalize_type(self._source(type_first, type_last)),
            value_type_range=self._span(type_first, type_last),
            value=self._source(value_first, value_last),
            value_range=self._span(value_first, value_last),
            range=self._span(keyword, value_last),
        )

    def _parse_enum(self) -> Enum:
        """Parse: enum name { members } [annotation]"""
        keyword = self._advance()
        name_tok = self._expect_identifier()
        self._parse_annotation()
        self._expect_symbol("{")
        members = self._parse_members(self._parse_enum_member)
        last = self._expect_symbol("}")
        annotation = self._parse_annotation()
        self._skip_separator()
        return Enum(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            range=self._span(keyword, annotation[1] if annotation else last),
            members=members,
        )

    def _parse_struct(self) -> Struct:
        """Parse: (struct | union | exception) name { fields } [annotation]"""
        keyword = self._advance()
        name_tok = self._expect_identifier()
        self._parse_annotation()
        self._expect_symbol("{")
        fields = self._parse_members(self._parse_field)
        last = self._expect_symbol("}")
        annotation = self._parse_annotation()
        self._skip_separator()
        return Struct(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            range=self._span(keyword, annotation[1] if annotation else last),
            fields=fields,
            type=_STRUCT_TYPES[keyword.value],
        )

    def _parse_service(self) -> Service:
        """Parse: service name [extends qualified_name] { functions } [annotation]"""
        keyword = self._advance()
        name_tok = self._expect_identifier()
        extends = None
        extends_range = None
        if self._is_word(self._peek(), "extends"):
            self._advance()
            extends, first, last = self._parse_qualified_name()
            extends_range = self._span(first, last)
        self._parse_annotation()
        self._expect_symbol("{")
        functions = self._parse_members(self._parse_function)
        last = self._expect_symbol("}")
        annotation = self._parse_annotation()
        self._skip_separator()
        return Service(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            range=self._span(keyword, annotation[1] if annotation else last),
            extends=extends,
            extends_range=extends_range,
            functions=functions,
        )

    # -- members --

    def _parse_members(self, parse_member: Callable[[], object]) -> list:
        """Collect members until the closing brace of the current block.

        A member that fails to parse is skipped up to its separator or the
        end of its line. Reaching a declaration keyword or EOF first means the
        block is unterminated.
        """
        members = []
        while True:
            tok = self._peek()
            if self._is_symbol(tok, "}"):
                return members
            if tok.type == TokenType.EOF or self._is_keyword(tok):
                raise ThriftParseError("Unterminated block", tok)
            start = self._pos
            try:
                members.append(parse_member())
            except ThriftParseError as exc:
                logger.debug("Skipping malformed member: %s", exc)
                self._pos = start
                self._skip_member(tok.line)

    def _parse_field(self) -> Field:
        """Parse: [id :] [required | optional] type name [= value] [annotation]"""
        first = self._peek()
        field_id = None
        if self._starts_field_id():
            sign = -1 if self._is_symbol(self._peek(), "-") else 1
            if sign < 0:
                self._advance()
            field_id = sign * _parse_int(self._advance().value)
            self._expect_symbol(":")

        requiredness = Requiredness.NONE
        if self._is_word(self._peek(), "required") or self._is_word(self._peek(), "optional"):
            requiredness = Requiredness(self._advance().value)

        type_first, type_last = self._parse_type()
        name_tok = self._expect_identifier()
        last = name_tok

        default_value = None
        default_range = None
        if self._is_symbol(self._peek(), "="):
            self._advance()
            value_first, value_last = self._parse_const_value()
            default_value = self._source(value_first, value_last)
            default_range = self._span(value_first, value_last)
            last = value_last

        annotation = None
        group = self._parse_annotation()
        if group:
            annotation = self._source(*group)
            last = group[1]
        self._skip_separator()

        return Field(
            id=field_id,
            requiredness=requiredness,
            field_type=normalize_type(self._source(type_first, type_last)),
            type_range=self._span(type_first, type_last),
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            range=self._span(first, last),
            default_value=default_value,
            default_value_range=default_range,
            annotation=annotation,
        )

    def _parse_enum_member(self) -> EnumMember:
        """Parse: name [= [-]number] [annotation]"""
        name_tok = self._expect_identifier()
        last = name_tok
        initializer = None
        initializer_range = None
        if self._is_symbol(self._peek(), "="):
            self._advance()
            first = self._peek()
            if self._is_symbol(first, "-") or self._is_symbol(first, "+"):
                self._advance()
            value_tok = self._peek()
            if value_tok.type != TokenType.NUMBER:
                raise ThriftParseError("Expected enum value", value_tok)
            self._advance()
            initializer = self._source(first, value_tok)
            initializer_range = self._span(first, value_tok)
            last = value_tok
        group = self._parse_annotation()
        if group:
            last = group[1]
        self._skip_separator()
        return EnumMember(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            range=self._span(name_tok, last),
            initializer=initializer,
            initializer_range=initializer_range,
        )

    def _parse_function(self) -> Function:
        """Parse: [oneway] type name ( fields ) [throws ( fields )] [annotation]"""
        first = self._peek()
        oneway = False
        if self._is_word(first, "oneway"):
            self._advance()
            oneway = True
        type_first, type_last = self._parse_type()
        name_tok = self._expect_identifier()
        self._expect_symbol("(")
        arguments = self._parse_field_list()
        last = self._expect_symbol(")")
        throws: List[Field] = []
        if self._is_word(self._peek(), "throws"):
            self._advance()
            self._expect_symbol("(")
            throws = self._parse_field_list()
            last = self._expect_symbol(")")
        self._parse_annotation()
        self._skip_separator()
        return Function(
            name=name_tok.value,
            name_range=self._span(name_tok, name_tok),
            return_type=normalize_type(self._source(type_first, type_last)),
            return_type_range=self._span(type_first, type_last),
            range=self._span(first, last),
            oneway=oneway,
            arguments=arguments,
            throws=throws,
        )

    def _parse_field_list(self) -> List[Field]:
        fields: List[Field] = []
        while not self._is_symbol(self._peek(), ")"):
            tok = self._peek()
            if tok.type == TokenType.EOF or self._is_keyword(tok):
                raise ThriftParseError("Unterminated argument list", tok)
            fields.append(self._parse_field())
        return fields

    # -- types and values --

    def _parse_type(self) -> Tuple[Token, Token]:
        """Parse: qualified_name [< type {, type} >]. Returns first/last token."""
        _, first, last = self._parse_qualified_name()
        if self._is_symbol(self._peek(), "<"):
            self._advance()
            while True:
                self._parse_type()
                if self._is_symbol(self._peek(), ","):
                    self._advance()
                    continue
                break
            last = self._expect_symbol(">")
        return first, last

    def _parse_const_value(self) -> Tuple[Token, Token]:
        """Parse a literal, identifier, list or map. Returns first/last token."""
        tok = self._peek()
        if self._is_symbol(tok, "["):
            self._advance()
            while not self._is_symbol(self._peek(), "]"):
                self._parse_const_value()
                self._skip_separator()
            return tok, self._advance()
        if self._is_symbol(tok, "{"):
            self._advance()
            while not self._is_symbol(self._peek(), "}"):
                self._parse_const_value()
                self._expect_symbol(":")
                self._parse_const_value()
                self._skip_separator()
            return tok, self._advance()
        if self._is_symbol(tok, "-") or self._is_symbol(tok, "+"):
            self._advance()
            number = self._peek()
            if number.type != TokenType.NUMBER:
                raise ThriftParseError("Expected number after sign", number)
            return tok, self._advance()
        if tok.type in (TokenType.NUMBER, TokenType.STRING):
            return tok, self._advance()
        _, first, last = self._parse_qualified_name()
        return first, last

    def _parse_qualified_name(self) -> Tuple[str, Token, Token]:
        """Parse: identifier {. identifier}"""
        first = self._expect_identifier()
        last = first
        parts = [first.value]
        while self._is_symbol(self._peek(), ".") and self._continues_name(self._peek(), self._peek(1)):
            self._advance()
            # reserved words are plain segments once dotted: com.example.service
            last = self._advance()
            parts.append(last.value)
        return ".".join(parts), first, last

    def _parse_annotation(self) -> Optional[Tuple[Token, Token]]:
        """Consume a balanced ( ... ) group if one follows."""
        first = self._peek()
        if not self._is_symbol(first, "("):
            return None
        depth = 0
        while True:
            tok = self._peek()
            if tok.type == TokenType.EOF or self._is_keyword(tok):
                raise ThriftParseError("Unterminated annotation", tok)
            self._advance()
            if self._is_symbol(tok, "("):
                depth += 1
            elif self._is_symbol(tok, ")"):
                depth -= 1
                if depth == 0:
                    return first, tok

    # -- skip helpers --

    def _skip_separator(self) -> None:
        tok = self._peek()
        if tok.type == TokenType.SYMBOL and tok.value in _SEPARATORS:
            self._advance()

    def _skip_line(self, line: int) -> None:
        """Skip stray tokens up to the next declaration keyword or line."""
        while not self._at_end():
            tok = self._peek()
            if tok.line != line or self._is_keyword(tok):
                return
            self._advance()

    def _skip_member(self, line: int) -> None:
        """Skip a broken member: up to its separator, its line end or the block end."""
        while not self._at_end():
            tok = self._peek()
            if self._is_symbol(tok, "}") or self._is_keyword(tok) or tok.line != line:
                return
            self._advance()
            if tok.type == TokenType.SYMBOL and tok.value in _SEPARATORS:
                return

    # -- token helpers --

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _expect_symbol(self, value: str) -> Token:
        tok = self._peek()
        if not self._is_symbol(tok, value):
            raise ThriftParseError(f"Expected {value!r}, got {tok.value!r}", tok)
        return self._advance()

    def _expect_identifier(self) -> Token:
        tok = self._peek()
        if tok.type != TokenType.IDENTIFIER or tok.value in TOP_LEVEL_KEYWORDS:
            raise ThriftParseError(f"Expected identifier, got {tok.value!r}", tok)
        return self._advance()

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _starts_field_id(self) -> bool:
        if self._peek().type == TokenType.NUMBER:
            return self._is_symbol(self._peek(1), ":")
        return (
            self._is_symbol(self._peek(), "-")
            and self._peek(1).type == TokenType.NUMBER
            and self._is_symbol(self._peek(2), ":")
        )

    @staticmethod
    def _is_symbol(tok: Token, value: str) -> bool:
        return tok.type == TokenType.SYMBOL and tok.value == value

    @staticmethod
    def _is_word(tok: Token, value: str) -> bool:
        return tok.type == TokenType.IDENTIFIER and tok.value == value

    @staticmethod
    def _continues_name(dot: Token, tok: Token) -> bool:
        """An identifier after '.'; a reserved word only when written directly after it."""
        if tok.type != TokenType.IDENTIFIER:
            return False
        if tok.value not in TOP_LEVEL_KEYWORDS:
            return True
        return tok.line == dot.line and tok.start == dot.end

    @staticmethod
    def _is_keyword(tok: Token) -> bool:
        return tok.type == TokenType.IDENTIFIER and tok.value in TOP_LEVEL_KEYWORDS

    # -- positions and source text --

    def _position(self, line: int, index: int) -> Position:
        return Position(line, utf16_column(self._lines[line], index))

    def _span(self, first: Token, last: Token) -> Range:
        return Range(self._position(first.line, first.start), self._position(last.line, last.end))

    def _source(self, first: Token, last: Token) -> str:
        if first.line == last.line:
            return self._lines[first.line][first.start:last.end]
        chunks = [self._lines[first.line][first.start:]]
        chunks.extend(self._lines[first.line + 1:last.line])
        chunks.append(self._lines[last.line][:last.end])
        return "\n".join(chunks)

    def _invalid(self, first_index: int, last_index: int) -> Invalid:
        first = self._tokens[first_index]
        last = self._tokens[max(first_index, last_index)]
        return Invalid(raw=self._source(first, last), range=self._span(first, last))


def _parse_int(text: str) -> int:
    if text.lower().startswith("0x"):
        return int(text, 16)
    try:
        return int(text)
    except ValueError:
        raise ThriftParseError(f"Expected integer, got {text!r}") from None


def parse_thrift(content) -> Document:
    """Parse Thrift source text (or a TextDocument) into a Document."""
    return ThriftParser(content).parse()
