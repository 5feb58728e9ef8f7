"""Completion items, snippets and hover documentation for PostFix documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from postfix_ide.core.positions import Position, Range, point_range, range_for_token
from postfix_ide.core.tokens import Token, TokenKind, block_comments, token_at, tokenize
from postfix_ide.services.builtin_catalog import BuiltinCatalog, FunctionDoc, VariableDoc, default_catalog
from postfix_ide.services.datadef import datadef_functions
from postfix_ide.services.doc_comments import attach_doc_comments
from postfix_ide.services.document_symbols import DocumentSymbols, collect_symbols, params_from_span, read_params_list

FUNCTION_SNIPPET = "${1:name}: (${2:parameters}) {\n    $0\n} fun"
_DOC_CLOSERS = (" >#", ">#")


@dataclass(frozen=True, slots=True)
class CompletionItem:
    label: str
    kind: str  # function | variable | snippet
    detail: str = ""
    documentation: str = ""
    source: str = ""  # file | builtins | datadef | snippet
    insert_text: str = ""  # snippet syntax; empty means insert the label
    range: Range | None = None  # text replaced by ``insert_text``


@dataclass(frozen=True, slots=True)
class Hover:
    range: Range
    contents: list[str]


def function_signature(doc: FunctionDoc) -> str:
    params = ", ".join(f"{param.name} {param.type}" if param.type else param.name for param in doc.params)
    returns = ", ".join(ret.type for ret in doc.returns)
    if returns:
        return f"({' ' + params if params else ''} -> {returns} )"
    return f"({' ' + params + ' ' if params else ''})"


def documented_symbols(source: str, tokens: Sequence[Token] | None = None) -> DocumentSymbols:
    """Symbols of ``source`` with the doc comments written right before their declarations."""
    token_list = list(tokens) if tokens is not None else list(tokenize(source))
    return collect_symbols(token_list, attach_doc_comments(token_list, block_comments(source)))


def completion_items(
    source: str,
    catalog: BuiltinCatalog | None = None,
    position: Position | None = None,
) -> list[CompletionItem]:
    """Completions for ``source``; snippets are offered only when ``position`` is given."""
    builtins = catalog if catalog is not None else default_catalog()
    symbols = documented_symbols(source)

    items: list[CompletionItem] = []
    for fn in symbols.functions:
        items.append(_function_item(fn.to_doc(), source="file"))
    for datadef in symbols.datadefs:
        for doc in datadef_functions(datadef):
            items.append(_function_item(doc, source="datadef"))
    for doc in builtins.functions:
        items.append(_function_item(doc, source="builtins"))

    seen_variables: set[str] = set()
    for var in symbols.variables:
        if var.name in seen_variables:
            continue
        seen_variables.add(var.name)
        items.append(CompletionItem(var.name, "variable", documentation=var.description, source="file"))
    for var_doc in builtins.variables:
        items.append(CompletionItem(var_doc.name, "variable", documentation=var_doc.description, source="builtins"))

    if position is not None:
        items.extend(snippet_completions(source, position))
    return items


def _function_item(doc: FunctionDoc, *, source: str) -> CompletionItem:
    return CompletionItem(
        label=doc.name,
        kind="function",
        detail=f"{function_signature(doc)} fun",
        documentation=doc.description,
        source=source,
    )


# ---------- Snippets ----------

def snippet_completions(source: str, position: Position) -> list[CompletionItem]:
    lines = str(source or "").split("\n")
    if position.line < 0 or position.line >= len(lines):
        return []
    line_text = lines[position.line]
    col = max(0, min(int(position.col), len(line_text)))

    items: list[CompletionItem] = []
    if not line_text.strip():
        items.append(
            CompletionItem(
                label="Generate a function",
                kind="snippet",
                documentation="Generate a function.",
                source="snippet",
                insert_text=FUNCTION_SNIPPET,
                range=point_range(Position(position.line, col)),
            )
        )
    if line_text[:col].endswith("#<"):
        doc_item = _function_doc_item(lines, position.line, col)
        if doc_item is not None:
            items.append(doc_item)
    return items


def _function_doc_item(lines: list[str], line: int, col: int) -> CompletionItem | None:
    after = "\n".join([lines[line][col:], *lines[line + 1 :]])
    closer = next((text for text in _DOC_CLOSERS if after.startswith(text)), "")
    tokens = list(tokenize(after[len(closer) :]))
    if len(tokens) < 2 or tokens[0].kind != TokenKind.SYMBOL or tokens[1].kind != TokenKind.PARAM_LIST_START:
        return None
    span = read_params_list(tokens, 1)
    if span is None:
        return None
    params, returns = params_from_span(tokens, span)

    snippet = ["", "$1"]
    snippet.extend(f"@param {param.name} ${idx + 2}" for idx, param in enumerate(params))
    snippet.extend(f"@return ${idx + len(params) + 2}" for idx in range(len(returns)))
    snippet.append(">#$0")
    return CompletionItem(
        label="Generate function documentation",
        kind="snippet",
        documentation="Generate a documentation comment for the function in the next line.",
        source="snippet",
        insert_text="\n".join(snippet),
        range=Range(Position(line, col), Position(line, col + len(closer))),
    )


# ---------- Hover ----------

def hover_at(source: str, position: Position, catalog: BuiltinCatalog | None = None) -> Hover | None:
    builtins = catalog if catalog is not None else default_catalog()
    tokens = list(tokenize(source))
    token = token_at(tokens, position)
    if token is None or token.kind != TokenKind.REFERENCE:
        return None

    symbols: DocumentSymbols | None = None
    # built-ins take precedence over definitions in the file
    function_docs: Sequence[FunctionDoc] = builtins.functions_named(token.text)
    if not function_docs:
        symbols = documented_symbols(source, tokens)
        function_docs = [fn.to_doc() for fn in symbols.functions if fn.name == token.text]
        if not function_docs:
            function_docs = [
                doc
                for datadef in symbols.datadefs
                for doc in datadef_functions(datadef)
                if doc.name == token.text
            ]
    if function_docs:
        contents: list[str] = []
        for doc in function_docs:
            contents.append(_function_hover_markdown(doc))
        return Hover(range=range_for_token(token), contents=contents)

    variable_docs: Sequence[VariableDoc] = builtins.variables_named(token.text)
    if not variable_docs:
        if symbols is None:
            symbols = documented_symbols(source, tokens)
        variable_docs = [
            VariableDoc(name=var.name, description=var.description) for var in symbols.variables if var.name == token.text
        ][:1]
    if variable_docs:
        contents = ["  \n".join(line for line in (f"```postfix\n{doc.name}\n```", doc.description) if line) for doc in variable_docs]
        return Hover(range=range_for_token(token), contents=contents)
    return None


def _function_hover_markdown(doc: FunctionDoc) -> str:
    lines = [f"```postfix\n{doc.name}: {function_signature(doc)} fun\n```"]
    if doc.description:
        lines.append(doc.description)
    for param in doc.params:
        suffix = f" – {param.description}" if param.description else ""
        lines.append(f"*@param* `{param.name}`{suffix}")
    for ret in doc.returns:
        lines.append(f"*@return* {ret.description if ret.description else f'`{ret.type}`'}")
    return "  \n".join(lines)
