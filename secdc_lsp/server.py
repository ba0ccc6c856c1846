from __future__ import annotations

"""
A minimal pygls-based Language Server for secdc programs.

Features:
- Text synchronization (pygls keeps the document text)
- Diagnostics: the buffer is read and compiled on every change; the single
  failure, if any, is published against the definition it names
- Hover: built-in signatures and defined functions
- Completion: built-ins, special forms and defined functions
- Document Symbols: defn / defentry from the indexer

The compiler is pure and fast, so the whole buffer is recompiled each time.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass

from pygls.server import LanguageServer
from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DOCUMENT_SYMBOL,
    TEXT_DOCUMENT_HOVER,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentSymbol,
    DocumentSymbolParams,
    Hover,
    HoverParams,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    SymbolKind,
)

from secdc import __version__
from secdc.compiler import compile_source
from secdc.compiler.builtins import SIGNATURES
from secdc.errors import SecdEntryError, SecdError
from secdc_lsp.indexer import DocumentIndex, SymbolDef, build_index

SOURCE = "secdc-ls"


@dataclass
class DocumentState:
    text: str
    index: DocumentIndex


class SecdcLanguageServer(LanguageServer):
    CMD_NAME = "secdc-ls"

    def __init__(self):
        super().__init__(self.CMD_NAME, f"v{__version__}")
        self.documents: Dict[str, DocumentState] = {}


ls = SecdcLanguageServer()


# --- Diagnostics ---
def _mk_range(line: int, col: int, length: int = 1) -> Range:
    return Range(start=Position(line=line, character=col), end=Position(line=line, character=col + length))


def _locate(err: SecdError, idx: DocumentIndex) -> Range:
    # Compiler messages start with the callee or form name: "f: defined function expected ..."
    name = str(err).split(":", 1)[0].strip()
    sdef: Optional[SymbolDef] = idx.symbols.get(name)
    if sdef is None and name == "defentry":
        sdef = idx.entry
    if sdef is None:
        return _mk_range(0, 0)
    return _mk_range(sdef.line, sdef.col, len(sdef.name))


def compile_diagnostics(text: str, idx: DocumentIndex) -> List[Diagnostic]:
    """Compile `text` and turn the failure, if any, into diagnostics."""
    diags: List[Diagnostic] = []

    if idx.paren_balance != 0:
        diags.append(
            Diagnostic(
                range=_mk_range(0, 0),
                message="Unmatched parentheses detected",
                severity=DiagnosticSeverity.Warning,
                source=SOURCE,
            )
        )

    try:
        compile_source(text)
    except SecdEntryError as err:
        diags.append(Diagnostic(range=_mk_range(0, 0), message=str(err),
                                severity=DiagnosticSeverity.Information, source=SOURCE))
    except SecdError as err:
        diags.append(Diagnostic(range=_locate(err, idx), message=str(err),
                                severity=DiagnosticSeverity.Error, source=SOURCE))
    return diags


def _refresh(uri: str) -> None:
    text = ls.workspace.get_text_document(uri).source
    idx = build_index(text)
    ls.documents[uri] = DocumentState(text=text, index=idx)
    ls.publish_diagnostics(uri, compile_diagnostics(text, idx))


# --- Text sync ---
@ls.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(params: DidOpenTextDocumentParams):
    _refresh(params.text_document.uri)


@ls.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: DidChangeTextDocumentParams):
    _refresh(params.text_document.uri)


@ls.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: DidCloseTextDocumentParams):
    uri = params.text_document.uri
    if uri in ls.documents:
        del ls.documents[uri]
    ls.publish_diagnostics(uri, [])


# --- Hover ---
def describe(word: str, idx: DocumentIndex) -> Optional[str]:
    if word in SIGNATURES:
        return SIGNATURES[word]
    sdef = idx.symbols.get(word)
    if sdef is not None:
        return f"{sdef.signature()} - function (defined at {sdef.line+1}:{sdef.col+1})"
    return None


@ls.feature(TEXT_DOCUMENT_HOVER)
def on_hover(params: HoverParams) -> Optional[Hover]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None

    word = extract_word_at(state.text, params.position.line, params.position.character)
    if not word:
        return None

    contents = describe(word, state.index)
    if contents is None:
        return None
    return Hover(contents=MarkupContent(kind=MarkupKind.PlainText, value=contents))


# --- Completion ---
def completion_items(idx: DocumentIndex) -> List[CompletionItem]:
    items = [CompletionItem(label=name, kind=CompletionItemKind.Function, detail=sig)
             for name, sig in SIGNATURES.items()]
    items.extend(CompletionItem(label=name, kind=CompletionItemKind.Function, detail=sdef.signature())
                 for name, sdef in idx.symbols.items())
    return items


@ls.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=["("]))
def on_completion(params: CompletionParams) -> CompletionList:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return CompletionList(is_incomplete=False, items=[])
    return CompletionList(is_incomplete=False, items=completion_items(state.index))


# --- Document Symbols ---
def document_symbols(idx: DocumentIndex) -> List[DocumentSymbol]:
    defs = list(idx.symbols.values())
    if idx.entry is not None:
        defs.insert(0, idx.entry)
    symbols: List[DocumentSymbol] = []
    for sdef in defs:
        rng = _mk_range(sdef.line, sdef.col, len(sdef.name))
        symbols.append(
            DocumentSymbol(
                name=sdef.name,
                detail=sdef.signature(),
                kind=SymbolKind.Function if sdef.kind == "function" else SymbolKind.Module,
                range=rng,
                selection_range=rng,
            )
        )
    return symbols


@ls.feature(TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def on_document_symbols(params: DocumentSymbolParams) -> Optional[List[DocumentSymbol]]:
    state = ls.documents.get(params.text_document.uri)
    if not state:
        return None
    return document_symbols(state.index)


# --- Helpers ---
def extract_word_at(text: str, line_no: int, character: int) -> Optional[str]:
    lines = text.splitlines(True)
    if line_no >= len(lines):
        return None
    line = lines[line_no]
    start = min(character, len(line))
    while start > 0 and line[start - 1] not in " \t()\n\r":
        start -= 1
    end = character
    while end < len(line) and line[end] not in " \t()\n\r":
        end += 1
    word = line[start:end]
    return word or None


def main():
    # Run the language server over stdio
    ls.start_io()


if __name__ == "__main__":
    main()
