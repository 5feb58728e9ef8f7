"""Static analysis of PostFix sources: brackets, parameter lists and references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence

from postfix_ide.core.positions import Position, Range, range_for_token
from postfix_ide.core.tokens import CLOSING_BRACKETS, OPENING_BRACKETS, Token, TokenKind, is_type_symbol, tokenize
from postfix_ide.services.builtin_catalog import BuiltinCatalog, default_catalog
from postfix_ide.services.document_symbols import DocumentSymbols, ParamsListSpan, collect_symbols


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


SEVERITY_ORDER = {Severity.ERROR: 2, Severity.WARNING: 1}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    message: str
    range: Range


ANALYSIS_DEFAULTS = {
    "enabled": True,
    "recursion_name": "recur",
    "warn_unresolved_references": True,
    "max_problems": 500,
}


def normalize_analysis_settings(settings: Mapping[str, Any] | None) -> dict[str, Any]:
    cfg = dict(ANALYSIS_DEFAULTS)
    if isinstance(settings, Mapping):
        cfg.update({key: value for key, value in settings.items() if key in ANALYSIS_DEFAULTS})
    cfg["enabled"] = bool(cfg.get("enabled", True))
    cfg["recursion_name"] = str(cfg.get("recursion_name") or "").strip()
    cfg["warn_unresolved_references"] = bool(cfg.get("warn_unresolved_references", True))
    try:
        cfg["max_problems"] = max(0, int(cfg.get("max_problems") or 0))
    except (TypeError, ValueError):
        cfg["max_problems"] = ANALYSIS_DEFAULTS["max_problems"]
    return cfg


def _error(message: str, token: Token) -> Diagnostic:
    return Diagnostic(Severity.ERROR, message, range_for_token(token))


def _warning(message: str, token: Token) -> Diagnostic:
    return Diagnostic(Severity.WARNING, message, range_for_token(token))


# ---------- Public API ----------

def analyze(
    source: str,
    catalog: BuiltinCatalog | None = None,
    *,
    settings: Mapping[str, Any] | None = None,
) -> list[Diagnostic]:
    return analyze_tokens(list(tokenize(source)), catalog, settings=settings)


def analyze_tokens(
    tokens: Sequence[Token],
    catalog: BuiltinCatalog | None = None,
    *,
    settings: Mapping[str, Any] | None = None,
) -> list[Diagnostic]:
    cfg = normalize_analysis_settings(settings)
    if not cfg["enabled"]:
        return []
    builtins = catalog if catalog is not None else default_catalog()
    symbols = collect_symbols(tokens)

    diagnostics: list[Diagnostic] = []
    diagnostics.extend(check_brackets(tokens))
    diagnostics.extend(check_params_lists(tokens, builtins, symbols=symbols))
    if cfg["warn_unresolved_references"]:
        diagnostics.extend(
            check_references(tokens, builtins, symbols=symbols, recursion_name=cfg["recursion_name"])
        )
    diagnostics.sort(key=lambda diag: (diag.range.start, -SEVERITY_ORDER[diag.severity]))
    limit = cfg["max_problems"]
    return diagnostics[:limit] if limit else diagnostics


def check_brackets(tokens: Iterable[Token]) -> Iterator[Diagnostic]:
    brackets: list[Token] = []
    for token in tokens:
        if token.kind in OPENING_BRACKETS:
            brackets.append(token)
            continue
        opener = CLOSING_BRACKETS.get(token.kind)
        if opener is None:
            continue
        top = brackets.pop() if brackets else None
        if top is None or top.kind != opener:
            yield _error("Expected matching opening bracket.", token)

    for open_bracket in brackets:
        yield _error("Expected matching closing bracket.", open_bracket)


def check_params_lists(
    tokens: Sequence[Token],
    catalog: BuiltinCatalog,
    *,
    symbols: DocumentSymbols | None = None,
) -> Iterator[Diagnostic]:
    doc_symbols = symbols if symbols is not None else collect_symbols(tokens)
    for span in doc_symbols.params_lists:
        known_types = set(catalog.types)
        known_types.update(doc_symbols.datadef_types_before(tokens[span.first].start))
        yield from check_params_list(tokens, span, catalog, known_types)


def check_params_list(
    tokens: Sequence[Token],
    span: ParamsListSpan,
    catalog: BuiltinCatalog,
    known_types: set[str],
) -> Iterator[Diagnostic]:
    first_param = span.first + 1
    for idx in range(first_param, span.params_end):
        token = tokens[idx]
        if token.kind not in (TokenKind.REFERENCE, TokenKind.SYMBOL):
            yield _error("The parameter list may only contain variable names and type names.", token)
        elif token.kind == TokenKind.REFERENCE:
            if catalog.is_function(token.text):
                yield _warning(
                    f"{token.text} collides with a built-in with the same name. You should rename the parameter.",
                    token,
                )
        elif not is_type_symbol(token.text):
            yield _error(f"{token.text} is not a valid type name.", token)
        elif idx == first_param:
            yield _error("Expected to find a variable name at the first position of the parameter list.", token)
        elif tokens[idx - 1].kind != TokenKind.REFERENCE:
            yield _error("Expected a parameter name to precede this type name.", token)
        elif token.text not in known_types:
            yield _warning(f"Unknown type {token.text}.", token)

    if span.arrow < 0:
        return
    for idx in range(span.arrow + 1, span.last):
        token = tokens[idx]
        if token.kind != TokenKind.SYMBOL:
            yield _error("The return list may only contain type names (e.g. :Int).", token)
        elif not is_type_symbol(token.text):
            yield _error(f"{token.text} is not a valid type name.", token)
        elif token.text not in known_types:
            yield _warning(f"Unknown type {token.text}.", token)


def check_references(
    tokens: Sequence[Token],
    catalog: BuiltinCatalog,
    *,
    symbols: DocumentSymbols | None = None,
    recursion_name: str = ANALYSIS_DEFAULTS["recursion_name"],
) -> Iterator[Diagnostic]:
    doc_symbols = symbols if symbols is not None else collect_symbols(tokens)
    known = doc_symbols.user_names() | doc_symbols.datadef_names()

    for idx, token in enumerate(tokens):
        if token.kind != TokenKind.REFERENCE:
            continue
        if doc_symbols.in_params_list(idx):
            continue
        name = token.text
        if catalog.is_builtin(name) or name in known:
            continue
        if _resolves_in_scope(doc_symbols, token.start, name, recursion_name):
            continue
        yield _warning(f"Unknown function or variable {name}.", token)


def _resolves_in_scope(symbols: DocumentSymbols, position: Position, name: str, recursion_name: str) -> bool:
    for scope in symbols.scopes_containing(position):
        if name in scope.params:
            return True
        if recursion_name and name == recursion_name and scope.kind == "fun":
            return True
    return False
