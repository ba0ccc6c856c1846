from __future__ import annotations
import sys


class Symbol:
    """An identifier read from source: a variable, parameter, function or form name.

    Two Symbols with the same text are equal and hash alike, so they key the
    scope frames, the function table and the built-in registry directly.
    """

    __slots__ = ("id",)

    def __init__(self, name: str):
        # Interned: table lookups compare identical strings
        self.id = sys.intern(name)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Symbol) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self):
        return f"Symbol({self.id!r})"

    def __str__(self):
        return self.id
