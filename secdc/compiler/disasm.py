from __future__ import annotations

from .chunk import Comment, Instruction, StreamEntry
from .linker import Program


def render_instruction(ins: Instruction) -> str:
    parts = [str(ins.opcode), *(str(op) for op in ins.operands)]
    if ins.note is not None:
        parts.append(f"; {ins.note}")
    return " ".join(parts)


def render_entry(item: StreamEntry) -> str:
    if isinstance(item, Comment):
        return f"; {item.text}"
    return "  " + render_instruction(item)


def render_program(program: Program, comments: bool = True, addresses: bool = False) -> list[str]:
    """Render a linked program as assembly lines.

    With `addresses`, each instruction line is prefixed by its absolute address
    and comment lines are indented to match.
    """
    out = []
    address = 0
    for item in program:
        if isinstance(item, Comment):
            if comments:
                out.append(("      " if addresses else "") + render_entry(item))
            continue
        if addresses:
            out.append(f"{address:04d}: " + render_instruction(item))
        else:
            out.append(render_entry(item))
        address += 1
    return out
