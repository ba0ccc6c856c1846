from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from secdc import SExpression
from secdc.config import CompilerOptions
from secdc.errors import SecdSyntaxError
from secdc.reader.parser import read, read_file

# Public surface for the compiler package
from .opcodes import Opcode
from .chunk import Chunk, Comment, Instruction
from .function import Branch, BranchRef, Entry, Function, FunctionRef
from .builtins import BUILTINS, BuiltIn, BuiltInContext
from .linker import Layout, Program, assign_positions, link
from .disasm import render_program
from .compiler import CallKind, Compiler, SPECIAL_FORMS


def _compile(load: Callable[[], list[SExpression]], options: Optional[CompilerOptions]) -> list[str]:
    compiler = Compiler(options)
    # reader and compiler both recurse once per nesting level
    try:
        compiler.evaluate(load())
    except RecursionError:
        raise SecdSyntaxError("expression nested too deeply") from None
    return compiler.compile()


def compile_source(source: str, options: Optional[CompilerOptions] = None) -> list[str]:
    """Read, compile and link a whole program; return the listing lines."""
    return _compile(lambda: read(source), options)


def compile_file(path: str | Path, options: Optional[CompilerOptions] = None) -> list[str]:
    return _compile(lambda: read_file(path), options)


__all__ = [
    "Opcode",
    "Chunk",
    "Comment",
    "Instruction",
    "Branch",
    "BranchRef",
    "Entry",
    "Function",
    "FunctionRef",
    "BUILTINS",
    "BuiltIn",
    "BuiltInContext",
    "Layout",
    "Program",
    "assign_positions",
    "link",
    "render_program",
    "CallKind",
    "Compiler",
    "SPECIAL_FORMS",
    "compile_source",
    "compile_file",
]
