"""Tokenizer for Thrift IDL source text.

Works line by line. Block comments that span several lines are tracked by
the CommentState carried in a ThriftTokenizer instance.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List


class TokenType(Enum):
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()
    SYMBOL = auto()
    COMMENT = auto()
    WHITESPACE = auto()

    # Special
    EOF = auto()


class CommentState(Enum):
    CODE = auto()
    BLOCK_COMMENT = auto()


@dataclass
class Token:
    type: TokenType
    value: str
    start: int
    end: int
    line: int = 0


_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_WHITESPACE = " \t\r\f\v"


class ThriftTokenizer:
    """Line tokenizer that remembers whether a block comment is still open."""

    def __init__(self) -> None:
        self.state = CommentState.CODE

    def tokenize_line(self, line: str, line_no: int = 0) -> List[Token]:
        tokens: List[Token] = []
        i = 0
        n = len(line)

        if self.state is CommentState.BLOCK_COMMENT:
            close = line.find("*/")
            if close < 0:
                if n:
                    tokens.append(Token(TokenType.COMMENT, line, 0, n, line_no))
                return tokens
            i = close + 2
            tokens.append(Token(TokenType.COMMENT, line[:i], 0, i, line_no))
            self.state = CommentState.CODE

        while i < n:
            ch = line[i]
            start = i

            # Whitespace run
            if ch in _WHITESPACE:
                while i < n and line[i] in _WHITESPACE:
                    i += 1
                tokens.append(Token(TokenType.WHITESPACE, line[start:i], start, i, line_no))
                continue

            # Line comments
            if ch == "#" or line.startswith("//", i):
                tokens.append(Token(TokenType.COMMENT, line[i:], start, n, line_no))
                break

            # Block comment, possibly left open at end of line
            if line.startswith("/*", i):
                close = line.find("*/", i + 2)
                if close < 0:
                    self.state = CommentState.BLOCK_COMMENT
                    tokens.append(Token(TokenType.COMMENT, line[i:], start, n, line_no))
                    break
                i = close + 2
                tokens.append(Token(TokenType.COMMENT, line[start:i], start, i, line_no))
                continue

            # String literal; an unterminated one runs to end of line
            if ch in ("'", '"'):
                i += 1
                while i < n and line[i] != ch:
                    if line[i] == "\\":
                        i += 1
                    i += 1
                body_end = min(i, n)
                i = min(i + 1, n)
                tokens.append(Token(TokenType.STRING, line[start + 1:body_end], start, i, line_no))
                continue

            # Number
            if ch.isdigit():
                match = _NUMBER_RE.match(line, i)
                i = match.end()
                tokens.append(Token(TokenType.NUMBER, line[start:i], start, i, line_no))
                continue

            # Identifier
            match = _IDENTIFIER_RE.match(line, i)
            if match:
                i = match.end()
                tokens.append(Token(TokenType.IDENTIFIER, line[start:i], start, i, line_no))
                continue

            # Anything else is a one-character symbol
            i += 1
            tokens.append(Token(TokenType.SYMBOL, ch, start, i, line_no))

        return tokens

    def tokenize_lines(self, lines: Iterable[str]) -> List[Token]:
        """Tokenize consecutive lines, carrying block-comment state between them."""
        tokens: List[Token] = []
        for line_no, line in enumerate(lines):
            tokens.extend(self.tokenize_line(line, line_no))
        return tokens


def tokenize_line(line: str) -> List[Token]:
    """Tokenize a single line with no block comment open at its start."""
    return ThriftTokenizer().tokenize_line(line)


def split_lines(text: str) -> List[str]:
    """Split source text into lines, dropping the CR of CRLF endings."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def tokenize_text(text: str) -> List[Token]:
    """Tokenize a whole document into tokens carrying 0-based line numbers."""
    return ThriftTokenizer().tokenize_lines(split_lines(text))
