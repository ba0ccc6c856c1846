"""Registry of built-in forms for the secdc compiler.

Maps Symbols to BuiltIn entries. Each entry carries its arity (None for
variadic) and an expander that receives the unevaluated argument forms and a
BuiltInContext. The compiler consults this table after the special forms and
before the function table.

Expanders are stack-machine code generators: operands are pushed left to
right, so the left operand sits below the right one when the opcode runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from secdc import SExpression
from secdc.errors import SecdArityError, SecdSyntaxError
from secdc.types.symbol import Symbol
from secdc.types.scope import Scope
from secdc.compiler.chunk import Chunk
from secdc.compiler.function import BranchRef
from secdc.compiler.opcodes import Opcode

if TYPE_CHECKING:
    from secdc.compiler.compiler import Compiler


class BuiltInContext:
    """Builder handed to expanders: compiles sub-forms into one chunk."""

    __slots__ = ("compiler", "scope", "chunk")

    def __init__(self, compiler: Compiler, scope: Scope):
        self.compiler = compiler
        self.scope = scope
        self.chunk = Chunk()

    def compile(self, expr: SExpression) -> Chunk:
        return self.compiler.compile_value(self.scope, expr)

    def push(self, *exprs: SExpression) -> None:
        """Compile each form in order and append its code."""
        for expr in exprs:
            self.chunk.extend(self.compile(expr))

    def branch(self, expr: SExpression) -> BranchRef:
        """Compile `expr` as a new branch table entry."""
        return self.compiler.compile_branch(self.compile(expr))

    def instruction(self, op: Opcode, *operands, note: str | None = None) -> None:
        self.chunk.emit_op(op, *operands, note=note)

    def comment(self, text: str) -> None:
        """Append an annotation line; it occupies no address."""
        self.chunk.emit_comment(text)


Expander = Callable[[BuiltInContext, list], None]


@dataclass(frozen=True)
class BuiltIn:
    name: str
    arity: Optional[int]
    expand: Expander

    def check_arity(self, args: list[SExpression]) -> None:
        if self.arity is not None and self.arity != len(args):
            raise SecdArityError(
                f"{self.name}: built-in function expected {self.arity} arguments but got {len(args)}"
            )


def _binary(op: Opcode) -> Expander:
    def expand(ctx: BuiltInContext, args: list[SExpression]) -> None:
        ctx.push(*args)
        ctx.instruction(op)
    return expand


def _unary(op: Opcode) -> Expander:
    def expand(ctx: BuiltInContext, args: list[SExpression]) -> None:
        ctx.push(args[0])
        ctx.instruction(op)
    return expand


def _lt(ctx: BuiltInContext, args: list[SExpression]) -> None:
    ctx.push([Symbol("not"), [Symbol(">="), args[0], args[1]]])


def _le(ctx: BuiltInContext, args: list[SExpression]) -> None:
    ctx.push([Symbol("not"), [Symbol(">"), args[0], args[1]]])


def _not(ctx: BuiltInContext, args: list[SExpression]) -> None:
    ctx.push([Symbol("="), args[0], 0])


def _if(ctx: BuiltInContext, args: list[SExpression]) -> None:
    ctx.push(args[0])
    ctx.instruction(Opcode.SEL, ctx.branch(args[1]), ctx.branch(args[2]))


def _list(ctx: BuiltInContext, args: list[SExpression]) -> None:
    if not args:
        raise SecdSyntaxError("list: Expected at least one argument")
    ctx.push(*args)
    # the zero terminates the chain
    ctx.push(0)
    for _ in args:
        ctx.instruction(Opcode.CONS)


def _nth(ctx: BuiltInContext, args: list[SExpression]) -> None:
    index = args[1]
    if not isinstance(index, int) or isinstance(index, bool) or index < 0:
        raise SecdSyntaxError(f"nth: index must be a non-negative integer literal, got {index}")
    ctx.push(args[0])
    for _ in range(index):
        ctx.instruction(Opcode.CDR)
    ctx.instruction(Opcode.CAR)


def _and(ctx: BuiltInContext, args: list[SExpression]) -> None:
    expr: SExpression = 1
    for arg in reversed(args):
        expr = [Symbol("if"), arg, expr, 0]
    ctx.push(expr)


def _or(ctx: BuiltInContext, args: list[SExpression]) -> None:
    expr: SExpression = 0
    for arg in reversed(args):
        expr = [Symbol("if"), arg, 1, expr]
    ctx.push(expr)


def _register(*entries: tuple[str, Optional[int], Expander]) -> dict[Symbol, BuiltIn]:
    return {Symbol(name): BuiltIn(name, arity, expand) for name, arity, expand in entries}


BUILTINS: dict[Symbol, BuiltIn] = _register(
    ("+", 2, _binary(Opcode.ADD)),
    ("-", 2, _binary(Opcode.SUB)),
    ("*", 2, _binary(Opcode.MUL)),
    ("/", 2, _binary(Opcode.DIV)),
    (">", 2, _binary(Opcode.CGT)),
    (">=", 2, _binary(Opcode.CGTE)),
    ("<", 2, _lt),
    ("<=", 2, _le),
    ("=", 2, _binary(Opcode.CEQ)),
    ("not", 1, _not),
    ("if", 3, _if),
    ("list", None, _list),
    ("cons", 2, _binary(Opcode.CONS)),
    ("car", 1, _unary(Opcode.CAR)),
    ("cdr", 1, _unary(Opcode.CDR)),
    ("nth", 2, _nth),
    ("and", None, _and),
    ("or", None, _or),
)

# Hover / completion signatures
SIGNATURES: dict[str, str] = {
    "+": "(+ a b)",
    "-": "(- a b)",
    "*": "(* a b)",
    "/": "(/ a b)",
    ">": "(> a b)",
    ">=": "(>= a b)",
    "<": "(< a b)",
    "<=": "(<= a b)",
    "=": "(= a b)",
    "not": "(not x)",
    "if": "(if test then else)",
    "list": "(list x &rest xs)",
    "cons": "(cons x xs)",
    "car": "(car xs)",
    "cdr": "(cdr xs)",
    "nth": "(nth xs n)",
    "and": "(and &rest xs)",
    "or": "(or &rest xs)",
    "let": "(let (name value ...) body...)",
    "defn": "(defn name (params...) body...)",
    "defentry": "(defentry (params...) body...)",
}
