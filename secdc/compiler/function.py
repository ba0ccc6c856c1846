from __future__ import annotations

from dataclasses import dataclass, field

from secdc.types.symbol import Symbol
from secdc.compiler.chunk import Chunk


@dataclass(frozen=True)
class FunctionRef:
    """Operand naming a function whose address is not known until link time."""

    name: Symbol

    def __str__(self) -> str:
        return f"<function {self.name}>"


@dataclass(frozen=True)
class BranchRef:
    """Operand naming a branch table slot whose address is not known until link time."""

    index: int

    def __str__(self) -> str:
        return f"<branch {self.index}>"


@dataclass
class Function:
    name: Symbol
    arity: int
    chunk: Chunk = field(default_factory=Chunk)

    def ref(self) -> FunctionRef:
        return FunctionRef(self.name)


@dataclass
class Branch:
    # Body of one conditional arm, ending in JOIN
    index: int
    chunk: Chunk

    def ref(self) -> BranchRef:
        return BranchRef(self.index)


@dataclass
class Entry:
    # The program's address-zero unit
    arity: int
    chunk: Chunk = field(default_factory=Chunk)
