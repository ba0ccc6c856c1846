from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

from secdc import Operand
from secdc.compiler.opcodes import Opcode


@dataclass(frozen=True)
class Instruction:
    """One machine instruction. Operands may still hold symbolic references."""

    opcode: Opcode
    operands: tuple[Operand, ...] = ()
    # Trailing annotation (e.g. the variable an LD reads); never an operand
    note: str | None = None


@dataclass(frozen=True)
class Comment:
    """Annotation line. Never emitted as code and never addressed."""

    text: str


StreamEntry = Union[Instruction, Comment]


@dataclass
class Chunk:
    """An ordered instruction stream: instructions mixed with comments."""

    entries: list[StreamEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[StreamEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def instructions(self) -> list[Instruction]:
        return [e for e in self.entries if isinstance(e, Instruction)]

    def instruction_count(self) -> int:
        return sum(1 for e in self.entries if isinstance(e, Instruction))

    def key(self) -> tuple[StreamEntry, ...]:
        """Hashable snapshot of the stream, used to share identical branches."""
        return tuple(self.entries)

    # --- Emit helpers ---
    def emit_op(self, op: Opcode, *operands: Operand, note: str | None = None) -> None:
        self.entries.append(Instruction(op, tuple(operands), note))

    def emit_comment(self, text: str) -> None:
        self.entries.append(Comment(text))

    def emit_const(self, value: int) -> None:
        self.emit_op(Opcode.LDC, str(value))

    def extend(self, other: Chunk) -> None:
        self.entries.extend(other.entries)
