from hypothesis import given, settings, strategies as st

from secdc.compiler import Compiler, Instruction, Opcode
from secdc.compiler.disasm import render_program
from secdc.config import CompilerOptions
from secdc.types.symbol import Symbol

A, B = Symbol("a"), Symbol("b")

leaf_strat = st.one_of(st.integers(min_value=-50, max_value=50), st.sampled_from([A, B]))


def _compound(children):
    binary = st.tuples(
        st.sampled_from(["+", "-", "*", "/", "=", ">", ">=", "<", "<=", "cons"]), children, children
    ).map(lambda t: [Symbol(t[0]), t[1], t[2]])
    unary = st.tuples(st.sampled_from(["not", "car", "cdr"]), children).map(lambda t: [Symbol(t[0]), t[1]])
    cond = st.tuples(children, children, children).map(lambda t: [Symbol("if"), *t])
    lists = st.lists(children, min_size=1, max_size=3).map(lambda xs: [Symbol("list"), *xs])
    logic = st.tuples(st.sampled_from(["and", "or"]), st.lists(children, max_size=3)).map(
        lambda t: [Symbol(t[0]), *t[1]]
    )
    let = st.tuples(children, children).map(lambda t: [Symbol("let"), [Symbol("c"), t[0]], [Symbol("+"), Symbol("c"), t[1]]])
    return st.one_of(binary, unary, cond, lists, logic, let)


expr_strat = st.recursive(leaf_strat, _compound, max_leaves=12)


def program(expr):
    return [
        [Symbol("defn"), Symbol("helper"), [A, B], expr],
        [Symbol("defentry"), [A, B], [Symbol("helper"), expr, B]],
    ]


def build(expr, share=False) -> Compiler:
    compiler = Compiler(CompilerOptions(share_branches=share))
    compiler.evaluate(program(expr))
    return compiler


@settings(max_examples=60, deadline=None)
@given(expr_strat, st.booleans())
def test_linking_preserves_instruction_count(expr, share):
    compiler = build(expr, share)
    units = [compiler.entry.chunk] + [f.chunk for f in compiler.functions.values()] + [b.chunk for b in compiler.branches]
    linked = compiler.link()
    assert linked.instruction_count() == sum(u.instruction_count() for u in units) == linked.layout.size


@settings(max_examples=60, deadline=None)
@given(expr_strat, st.booleans())
def test_compilation_is_deterministic(expr, share):
    first = build(expr, share).compile()
    second = build(expr, share).compile()
    assert first == second


@settings(max_examples=60, deadline=None)
@given(expr_strat)
def test_select_targets_are_branches(expr):
    compiler = build(expr)
    linked = compiler.link()
    starts = set(linked.layout.branches.values())
    for br in compiler.branches:
        assert br.chunk.instructions[-1].opcode is Opcode.JOIN

    address = 0
    for item in linked:
        if not isinstance(item, Instruction):
            continue
        if item.opcode is Opcode.SEL:
            assert len(item.operands) == 2
            for target in item.operands:
                assert int(target) in starts
                assert int(target) != address
        address += 1


@settings(max_examples=40, deadline=None)
@given(expr_strat)
def test_comments_never_change_addresses(expr):
    linked = build(expr).link()
    with_comments = [line for line in render_program(linked, addresses=True) if not line.lstrip().startswith(";")]
    assert with_comments == render_program(linked, comments=False, addresses=True)


@settings(max_examples=40, deadline=None)
@given(expr_strat)
def test_sharing_never_adds_branches(expr):
    assert len(build(expr, share=True).branches) <= len(build(expr).branches)
