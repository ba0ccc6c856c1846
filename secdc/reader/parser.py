"""
  secdc Reader, Lexer and Parser

- Streaming, lazy parsing
- Emits Python primitives instead of Cons cells:

    - integers -> int
    - identifiers -> Symbol
    - lists -> Python list
    - ; line comments are skipped
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Optional

from secdc import SExpression
from secdc.errors import SecdSyntaxError
from secdc.types.symbol import Symbol


TOKEN_RE = re.compile(
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r"|(?P<symbol>[^\s()'\"`,;]+)"  # numbers and identifiers
)

INTEGER_RE = re.compile(r"-?\d+")


def lex(source: str) -> Iterator[tuple[str, str]]:
    """Token generator: yields (token_type, token_value) tuples."""
    pos = 0
    n = len(source)
    while pos < n:
        if source[pos].isspace():
            pos += 1
            continue
        match = TOKEN_RE.match(source, pos)
        if not match:
            raise SecdSyntaxError(f"Unexpected char at {pos}: {source[pos]!r}")
        pos = match.end()
        kind = match.lastgroup
        if kind == "comment":
            continue
        yield kind, match.group(kind)


def parse_atom(token: str) -> SExpression:
    if INTEGER_RE.fullmatch(token):
        return int(token)
    return Symbol(token)


class TokenStream:
    def __init__(self, token_iter: Iterator[tuple[str, str]]):
        self.tokens = iter(token_iter)
        self.buffer: list[tuple[str, str]] = []

    def peek(self) -> tuple[Optional[str], Optional[str]]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None, None
        return self.buffer[0]

    def advance(self) -> tuple[Optional[str], Optional[str]]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, (None, None))

    def parse_expr(self) -> SExpression:
        """Parse one expression, or return None at end of input."""
        tok_type, tok_val = self.peek()
        if tok_type is None:
            return None

        if tok_type == "symbol":
            self.advance()
            return parse_atom(tok_val)

        if tok_type == "rparen":
            raise SecdSyntaxError("Unexpected ')'")

        # List
        self.advance()
        items = []
        while True:
            tok_type, _ = self.peek()
            if tok_type == "rparen":
                self.advance()
                return items
            if tok_type is None:
                raise SecdSyntaxError("Unexpected end of input: unmatched '('")
            items.append(self.parse_expr())

    def parse_all(self) -> Iterator[SExpression]:
        while True:
            tok_type, _ = self.peek()
            if tok_type is None:
                break
            yield self.parse_expr()


def read(source: str) -> list[SExpression]:
    """Parse every top-level expression of `source`."""
    return list(TokenStream(lex(source)).parse_all())


def read_file(path: str | Path) -> list[SExpression]:
    """Read a UTF-8 source file; undecodable bytes are a syntax error."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as err:
        raise SecdSyntaxError(f"source is not valid UTF-8: byte {err.start}") from None
    return read(source)
