from __future__ import annotations

"""
Lightweight indexer for secdc source files without compiling them.

We scan for top-level definitions and build an index for:
- functions: (defn name (params...) ...)
- the program entry: (defentry (params...) ...)

The scanner is tolerant of partial/incomplete buffers. It extracts only
enough structure to power LSP features (document symbols, hover, completion
and placing compile diagnostics on the definition they concern).
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple
import re

TOKEN_REGEX = re.compile(r";[^\n]*|\(|\)|[^\s();]+")


@dataclass
class SymbolDef:
    name: str
    kind: str  # "function" | "entry"
    line: int
    col: int
    params: List[str] = field(default_factory=list)

    def signature(self) -> str:
        head = "defentry" if self.kind == "entry" else self.name
        return f"({' '.join([head, *self.params])})"


@dataclass
class DocumentIndex:
    symbols: Dict[str, SymbolDef] = field(default_factory=dict)
    entry: Optional[SymbolDef] = None
    paren_balance: int = 0


def _iter_tokens(text: str) -> Iterator[Tuple[str, int]]:
    for m in TOKEN_REGEX.finditer(text):
        tok = m.group(0)
        if tok.startswith(";"):
            continue
        yield tok, m.start()


def position_from_offset(text: str, offset: int) -> Tuple[int, int]:
    # Return (line, col), 0-based
    line = text.count("\n", 0, offset)
    last_nl = text.rfind("\n", 0, offset)
    col = offset if last_nl == -1 else offset - last_nl - 1
    return line, col


def _read_params(tokens: List[Tuple[str, int]], i: int) -> List[str]:
    # tokens[i] should open the parameter list
    params: List[str] = []
    if i >= len(tokens) or tokens[i][0] != "(":
        return params
    i += 1
    while i < len(tokens) and tokens[i][0] not in ("(", ")"):
        params.append(tokens[i][0])
        i += 1
    return params


def build_index(text: str) -> DocumentIndex:
    idx = DocumentIndex()
    tokens = list(_iter_tokens(text))

    for i, (tok, start) in enumerate(tokens):
        if tok == ")":
            idx.paren_balance -= 1
            continue
        if tok != "(":
            continue
        idx.paren_balance += 1
        # Only top-level forms define anything
        if idx.paren_balance != 1 or i + 1 >= len(tokens):
            continue
        head, head_start = tokens[i + 1]
        if head == "defn" and i + 2 < len(tokens):
            name, name_start = tokens[i + 2]
            if name in ("(", ")"):
                continue
            line, col = position_from_offset(text, name_start)
            idx.symbols[name] = SymbolDef(name, "function", line, col, _read_params(tokens, i + 3))
        elif head == "defentry":
            line, col = position_from_offset(text, head_start)
            idx.entry = SymbolDef("defentry", "entry", line, col, _read_params(tokens, i + 2))

    return idx
