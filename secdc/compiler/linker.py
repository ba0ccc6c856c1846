"""Two-pass linker.

Units are laid out in a fixed order: the entry at address 0, then every
function in declaration order, then every branch in first-use order. The
first pass counts instructions to give each unit its absolute address; the
second replaces FunctionRef / BranchRef operands with those addresses. All
addresses are known before any operand is expanded, so a unit may refer to
one laid out after it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from secdc import Operand
from secdc.errors import SecdLinkError
from secdc.types.symbol import Symbol

from .chunk import Chunk, Comment, Instruction, StreamEntry
from .function import Branch, BranchRef, Entry, Function, FunctionRef

LOGGER = logging.getLogger("secdc.linker")


@dataclass
class Layout:
    """Absolute address of every unit."""

    functions: dict[Symbol, int] = field(default_factory=dict)
    branches: dict[int, int] = field(default_factory=dict)
    size: int = 0
    entry: int = 0


@dataclass
class Program:
    """Linked output: every operand is literal text."""

    layout: Layout
    entries: list[StreamEntry] = field(default_factory=list)

    def __iter__(self) -> Iterator[StreamEntry]:
        return iter(self.entries)

    def instruction_count(self) -> int:
        return sum(1 for e in self.entries if isinstance(e, Instruction))


def _units(entry: Entry, functions: list[Function], branches: list[Branch]) -> list[Chunk]:
    return [entry.chunk] + [fn.chunk for fn in functions] + [br.chunk for br in branches]


def assign_positions(entry: Entry, functions: list[Function], branches: list[Branch]) -> Layout:
    """First pass: count instructions (comments are free) to place each unit."""
    layout = Layout()
    counter = entry.chunk.instruction_count()
    for fn in functions:
        layout.functions[fn.name] = counter
        counter += fn.chunk.instruction_count()
    for br in branches:
        layout.branches[br.index] = counter
        counter += br.chunk.instruction_count()
    layout.size = counter
    return layout


def resolve_operand(layout: Layout, operand: Operand) -> str:
    if isinstance(operand, FunctionRef):
        position = layout.functions.get(operand.name)
        if position is None:
            raise SecdLinkError(f"No such function: {operand.name}")
        return str(position)

    if isinstance(operand, BranchRef):
        position = layout.branches.get(operand.index)
        if position is None:
            raise SecdLinkError(f"No such branch: {operand.index}")
        return str(position)

    if not isinstance(operand, str):
        raise SecdLinkError(f"INTERNAL: got unexpected non-string operand: {operand!r}")

    return operand


def resolve_chunk(layout: Layout, chunk: Chunk) -> list[StreamEntry]:
    """Second pass over one unit."""
    result: list[StreamEntry] = []
    for item in chunk:
        if isinstance(item, Comment):
            result.append(item)
            continue
        operands = tuple(resolve_operand(layout, op) for op in item.operands)
        result.append(Instruction(item.opcode, operands, item.note))
    return result


def link(entry: Entry, functions: list[Function], branches: list[Branch]) -> Program:
    layout = assign_positions(entry, functions, branches)
    LOGGER.debug(
        "layout: %d instructions, functions=%s, branches=%s",
        layout.size,
        {str(k): v for k, v in layout.functions.items()},
        layout.branches,
    )
    program = Program(layout)
    for chunk in _units(entry, functions, branches):
        program.entries.extend(resolve_chunk(layout, chunk))
    return program
