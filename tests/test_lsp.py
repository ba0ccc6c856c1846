from lsprotocol.types import DiagnosticSeverity, SymbolKind

from secdc_lsp.indexer import build_index, position_from_offset
from secdc_lsp.server import (
    compile_diagnostics,
    completion_items,
    describe,
    document_symbols,
    extract_word_at,
)

SOURCE = """(defn add (a b) (+ a b))
; helper
(defn inc (x)
  (add x 1))
(defentry (n) (inc n))
"""


def test_index_finds_definitions():
    idx = build_index(SOURCE)
    assert set(idx.symbols) == {"add", "inc"}
    assert (idx.symbols["add"].line, idx.symbols["add"].col) == (0, 6)
    assert (idx.symbols["inc"].line, idx.symbols["inc"].col) == (2, 6)
    assert idx.symbols["add"].params == ["a", "b"]
    assert idx.symbols["inc"].signature() == "(inc x)"
    assert idx.entry is not None and idx.entry.line == 4
    assert idx.paren_balance == 0


def test_index_ignores_nested_forms_and_partial_buffers():
    idx = build_index("(defentry () (let (x 1) (defn inner (y) y))) (defn")
    assert idx.symbols == {}
    assert idx.paren_balance == 1


def test_position_from_offset():
    assert position_from_offset("ab\ncd", 4) == (1, 1)
    assert position_from_offset("abc", 2) == (0, 2)


def test_clean_program_has_no_diagnostics():
    assert compile_diagnostics(SOURCE, build_index(SOURCE)) == []


def test_arity_error_points_at_callee_definition():
    text = "(defn add (a b) (+ a b))\n(defentry () (add 1))"
    diags = compile_diagnostics(text, build_index(text))
    assert len(diags) == 1
    assert diags[0].severity == DiagnosticSeverity.Error
    assert diags[0].message == "add: defined function expected 2 arguments but got 1"
    assert diags[0].range.start.line == 0
    assert diags[0].range.start.character == 6


def test_missing_entry_is_informational():
    text = "(defn add (a b) (+ a b))"
    diags = compile_diagnostics(text, build_index(text))
    assert [d.severity for d in diags] == [DiagnosticSeverity.Information]


def test_unbalanced_buffer_reports_both():
    text = "(defentry () (+ 1 2)"
    messages = [d.message for d in compile_diagnostics(text, build_index(text))]
    assert messages[0] == "Unmatched parentheses detected"
    assert "unmatched '('" in messages[1]


def test_describe_builtins_and_functions():
    idx = build_index(SOURCE)
    assert describe("if", idx) == "(if test then else)"
    assert describe("add", idx) == "(add a b) - function (defined at 1:7)"
    assert describe("nope", idx) is None


def test_completion_lists_builtins_and_functions():
    labels = {item.label for item in completion_items(build_index(SOURCE))}
    assert {"+", "let", "defentry", "add", "inc"} <= labels


def test_document_symbols():
    symbols = document_symbols(build_index(SOURCE))
    assert [s.name for s in symbols] == ["defentry", "add", "inc"]
    assert symbols[0].kind == SymbolKind.Module
    assert symbols[1].kind == SymbolKind.Function


def test_extract_word_at():
    assert extract_word_at(SOURCE, 0, 8) == "add"
    assert extract_word_at(SOURCE, 0, 17) == "+"
    assert extract_word_at(SOURCE, 0, 0) is None
    assert extract_word_at(SOURCE, 40, 0) is None


def test_deep_nesting_becomes_a_diagnostic():
    text = "(defentry () " + "(car " * 5000 + "1" + ")" * 5000 + ")"
    diags = compile_diagnostics(text, build_index(text))
    assert [d.message for d in diags] == ["expression nested too deeply"]
    assert diags[0].severity == DiagnosticSeverity.Error
