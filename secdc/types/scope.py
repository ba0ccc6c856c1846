"""Compile-time lexical scope for secdc.

A Scope is one environment frame of the target machine: it maps each bound
Symbol to its slot index. Frames are chained through `parent` following the
lexical (declaration-time) nesting, so a lookup yields the lexical address
`(index, depth)` the machine's LD instruction expects.
"""

from __future__ import annotations

from io import StringIO
from typing import Iterable, Optional

from secdc.errors import SecdSyntaxError
from secdc.types.symbol import Symbol


class Scope:
    """One frame of Symbol -> slot bindings with a link to the enclosing frame."""

    __slots__ = ("slots", "parent")

    def __init__(self, slots: dict[Symbol, int] | None = None, parent: Optional[Scope] = None):
        self.slots: dict[Symbol, int] = dict(slots) if slots else {}
        self.parent: Scope | None = parent

    @classmethod
    def from_params(cls, params: Iterable[Symbol], parent: Optional[Scope] = None) -> Scope:
        """Build a frame where parameter `i` occupies slot `i`.

        Raises SecdSyntaxError if a parameter is not a Symbol or is repeated.
        """
        slots: dict[Symbol, int] = {}
        for i, param in enumerate(params):
            if not isinstance(param, Symbol):
                raise SecdSyntaxError(f"parameter must be a symbol, got {param!r}")
            if param in slots:
                raise SecdSyntaxError(f"duplicate parameter: {param}")
            slots[param] = i
        return cls(slots, parent)

    def lookup(self, name: Symbol) -> tuple[int, int] | None:
        """Return `(index, depth)` of the innermost binding of `name`, or None.

        Depth counts the parent hops taken before a frame defining `name` was found.
        """
        scope: Optional[Scope] = self
        depth = 0
        while scope is not None:
            index = scope.slots.get(name)
            if index is not None:
                return index, depth
            scope = scope.parent
            depth += 1
        return None

    def depth(self) -> int:
        """Number of frames above this one."""
        n = 0
        scope = self.parent
        while scope is not None:
            n += 1
            scope = scope.parent
        return n

    def _write_slots(self, buffer: StringIO) -> None:
        buffer.write("{")
        buffer.write(", ".join(f"{k}: {v}" for k, v in self.slots.items()))
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_slots(buffer)
            if self.parent is not None:
                buffer.write(" -> ...")
            return buffer.getvalue()

    def __repr__(self) -> str:
        with StringIO() as buffer:
            buffer.write("<Scope chain: ")
            scope: Optional[Scope] = self
            first = True
            while scope is not None:
                if not first:
                    buffer.write(" -> ")
                scope._write_slots(buffer)
                first = False
                scope = scope.parent
            buffer.write(">")
            return buffer.getvalue()
