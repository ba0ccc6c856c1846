from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from secdc import SExpression
from secdc.config import CompilerOptions
from secdc.errors import SecdArityError, SecdEntryError, SecdNameError, SecdSyntaxError
from secdc.reader.printer import to_source
from secdc.types.scope import Scope
from secdc.types.symbol import Symbol

from .builtins import BUILTINS, BuiltInContext
from .chunk import Chunk
from .disasm import render_program
from .function import Branch, BranchRef, Entry, Function
from .linker import Program, link
from .opcodes import Opcode

LOGGER = logging.getLogger("secdc.compiler")

DEFN = Symbol("defn")
DEFENTRY = Symbol("defentry")
LET = Symbol("let")


class CallKind(Enum):
    SPECIAL_FORM = "special form"
    BUILTIN = "built-in"
    FUNCTION = "function"


class Compiler:
    """
    Compiles top-level definitions into the entry, function table and branch
    table, then links them into one addressed listing.

    One instance compiles one program: all tables and the let counter belong to it.
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options if options is not None else CompilerOptions()
        self.functions: dict[Symbol, Function] = {}
        self.branches: list[Branch] = []
        self.entry: Entry | None = None
        self.toplevel = Scope()
        self._branch_cache: dict[tuple, BranchRef] = {}
        self._let = 0

    # --- Driver ---
    def evaluate(self, expressions: Iterable[SExpression]) -> None:
        """Compile a sequence of top-level `defn` / `defentry` forms."""
        expressions = list(expressions)
        for expr in expressions:
            if not (isinstance(expr, list) and expr and expr[0] in (DEFN, DEFENTRY)):
                raise SecdSyntaxError(f"top-level form must be defn or defentry, got {to_source(expr)}")
        # Declare every signature first so bodies may call functions defined later
        for expr in expressions:
            if expr[0] == DEFN:
                name, params, _ = _definition_parts("defn", expr[1:], named=True)
                self.declare_function(name, len(params))
        self.compile_sexpr(self.toplevel, expressions)

    def link(self) -> Program:
        if self.entry is None:
            raise SecdEntryError("no entry point: program has no defentry")
        return link(self.entry, list(self.functions.values()), self.branches)

    def compile(self) -> list[str]:
        """Link the compiled tables and render the listing."""
        program = self.link()
        return render_program(program, comments=self.options.comments, addresses=self.options.addresses)

    # --- Tables ---
    def declare_function(self, name: Symbol, arity: int) -> Function:
        if name in SPECIAL_FORMS or name in BUILTINS:
            kind = CallKind.SPECIAL_FORM if name in SPECIAL_FORMS else CallKind.BUILTIN
            raise SecdSyntaxError(f"defn: cannot redefine {kind.value} {name}")
        if name in self.functions:
            raise SecdSyntaxError(f"defn: function {name} is already defined")
        fn = Function(name, arity)
        self.functions[name] = fn
        LOGGER.debug("declared function %s/%d", name, arity)
        return fn

    def compile_branch(self, chunk: Chunk) -> BranchRef:
        """Register `chunk` (plus a trailing JOIN) as a branch and return its reference."""
        body = Chunk(list(chunk.entries))
        body.emit_op(Opcode.JOIN)

        if self.options.share_branches:
            cached = self._branch_cache.get(body.key())
            if cached is not None:
                LOGGER.debug("reusing branch %d", cached.index)
                return cached

        branch = Branch(len(self.branches), body)
        self.branches.append(branch)
        ref = branch.ref()
        if self.options.share_branches:
            self._branch_cache[body.key()] = ref
        LOGGER.debug("registered branch %d (%d instructions)", branch.index, body.instruction_count())
        return ref

    def next_let_name(self) -> Symbol:
        self._let += 1
        name = Symbol(f"__let{self._let}")
        while name in self.functions:
            self._let += 1
            name = Symbol(f"__let{self._let}")
        return name

    # --- Expressions ---
    def compile_value(self, scope: Scope, arg: SExpression) -> Chunk:
        chunk = Chunk()
        if isinstance(arg, int) and not isinstance(arg, bool):
            chunk.emit_const(arg)
            return chunk

        if isinstance(arg, Symbol):
            local = scope.lookup(arg)
            if local is not None:
                index, depth = local
                chunk.emit_op(Opcode.LD, str(depth), str(index), note=str(arg))
                return chunk

            fn = self.functions.get(arg)
            if fn is not None:
                chunk.emit_op(Opcode.LDF, fn.ref(), note=str(arg))
                return chunk

            raise SecdNameError(f"no such variable in scope: {arg}")

        if isinstance(arg, list):
            return self.compile_sexpr(scope, [arg])

        raise SecdSyntaxError(f"invalid argument: {arg!r}")

    def compile_values(self, scope: Scope, args: Iterable[SExpression]) -> Chunk:
        chunk = Chunk()
        for arg in args:
            chunk.extend(self.compile_value(scope, arg))
        return chunk

    def compile_sexpr(self, scope: Scope, exprs: Iterable[SExpression]) -> Chunk:
        chunk = Chunk()
        for expr in exprs:
            if isinstance(expr, list):
                chunk.extend(self.compile_call(scope, expr))
            else:
                chunk.extend(self.compile_value(scope, expr))
        return chunk

    def resolve_call(self, head: SExpression) -> tuple[CallKind, Any]:
        """Classify a call head: special form, then built-in, then declared function."""
        if not isinstance(head, Symbol):
            raise SecdSyntaxError(f"call head must be a symbol, got {to_source(head)}")
        if head in SPECIAL_FORMS:
            return CallKind.SPECIAL_FORM, SPECIAL_FORMS[head]
        if head in BUILTINS:
            return CallKind.BUILTIN, BUILTINS[head]
        fn = self.functions.get(head)
        if fn is not None:
            return CallKind.FUNCTION, fn
        raise SecdNameError(f"no such variable or built-in: {head}")

    def compile_call(self, scope: Scope, form: list) -> Chunk:
        if not form:
            raise SecdSyntaxError("cannot compile empty form ()")
        head, *args = form
        kind, target = self.resolve_call(head)

        if kind is CallKind.SPECIAL_FORM:
            return target(self, scope, args)

        if kind is CallKind.BUILTIN:
            target.check_arity(args)
            ctx = BuiltInContext(self, scope)
            target.expand(ctx, args)
            return ctx.chunk

        return self.compile_function_call(scope, target, args)

    def compile_function_call(self, scope: Scope, fn: Function, args: list[SExpression]) -> Chunk:
        if fn.arity != len(args):
            raise SecdArityError(f"{fn.name}: defined function expected {fn.arity} arguments but got {len(args)}")
        chunk = self.compile_values(scope, args)
        chunk.emit_op(Opcode.LDF, fn.ref())
        chunk.emit_op(Opcode.AP, str(len(args)), note=str(fn.name))
        return chunk

    def compile_body(self, label: str, params: list[Symbol], body: list[SExpression], parent: Scope | None) -> Chunk:
        """Compile a procedure body in a fresh frame built from `params`, ending in RTN."""
        scope = Scope.from_params(params, parent)
        chunk = Chunk()
        chunk.emit_comment(f"{label} := {to_source(params)} {' '.join(to_source(e) for e in body)}")
        chunk.extend(self.compile_sexpr(scope, body))
        chunk.emit_op(Opcode.RTN)
        return chunk

    # --- Special forms ---
    def compile_defn(self, scope: Scope, tail: list[SExpression]) -> Chunk:
        if scope is not self.toplevel:
            raise SecdSyntaxError("defn: only allowed at top level")
        name, params, body = _definition_parts("defn", tail, named=True)
        fn = self.functions.get(name)
        if fn is None:
            fn = self.declare_function(name, len(params))
        fn.chunk = self.compile_body(str(name), params, body, parent=None)
        return Chunk()

    def compile_defentry(self, scope: Scope, tail: list[SExpression]) -> Chunk:
        if scope is not self.toplevel:
            raise SecdSyntaxError("defentry: only allowed at top level")
        if self.entry is not None:
            raise SecdSyntaxError("defentry: entry point is already defined")
        _, params, body = _definition_parts("defentry", tail, named=False)
        self.entry = Entry(len(params), self.compile_body("entry", params, body, parent=None))
        LOGGER.debug("declared entry/%d", self.entry.arity)
        return Chunk()

    def compile_let(self, scope: Scope, tail: list[SExpression]) -> Chunk:
        """(let (n1 v1 n2 v2 ...) body...) becomes a call to a synthetic __let<N> function
        whose frame is parented on the enclosing scope."""
        if not tail or not isinstance(tail[0], list):
            raise SecdSyntaxError("let: expected a binding list")
        bindings, body = tail[0], tail[1:]
        if len(bindings) % 2 != 0:
            raise SecdSyntaxError("let: bindings must be even")
        if not body:
            raise SecdSyntaxError("let: expected a body")

        names = bindings[0::2]
        values = bindings[1::2]
        fn = self.declare_function(self.next_let_name(), len(names))
        fn.chunk = self.compile_body(str(fn.name), names, body, parent=scope)
        return self.compile_function_call(scope, fn, values)


def _definition_parts(form: str, tail: list[SExpression], named: bool) -> tuple[Symbol | None, list, list]:
    name = None
    if named:
        if not tail or not isinstance(tail[0], Symbol):
            raise SecdSyntaxError(f"{form}: expected a function name")
        name, tail = tail[0], tail[1:]
    if not tail or not isinstance(tail[0], list):
        raise SecdSyntaxError(f"{form}: expected a parameter list")
    params, body = tail[0], tail[1:]
    if not body:
        raise SecdSyntaxError(f"{form}: expected a body")
    return name, params, body


SpecialForm = Callable[[Compiler, Scope, list], Chunk]

SPECIAL_FORMS: dict[Symbol, SpecialForm] = {
    LET: Compiler.compile_let,
    DEFN: Compiler.compile_defn,
    DEFENTRY: Compiler.compile_defentry,
}
