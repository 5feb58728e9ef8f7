"""Token scanners that find declarations, parameter lists and body scopes in a PostFix document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from postfix_ide.core.positions import Position, Range
from postfix_ide.core.tokens import CLOSING_BRACKETS, OPENING_BRACKETS, Token, TokenKind, symbol_name
from postfix_ide.services.builtin_catalog import FunctionDoc, ParamDoc, ReturnDoc
from postfix_ide.services.datadef import Datadef, datadef_function_names
from postfix_ide.services.doc_comments import DocComment, document_params, document_returns


@dataclass(frozen=True, slots=True)
class ParamsListSpan:
    first: int  # index of "("
    last: int  # index of ")"
    arrow: int = -1  # index of "->", or -1

    @property
    def params_end(self) -> int:
        return self.arrow if self.arrow >= 0 else self.last

    def contains_index(self, index: int) -> bool:
        return self.first <= index <= self.last


@dataclass(frozen=True, slots=True)
class BodyScope:
    body: Range
    params: frozenset[str]
    kind: str  # fun | lam


@dataclass(frozen=True, slots=True)
class FunctionSymbol:
    name: str
    position: Position
    params: tuple[ParamDoc, ...] = ()
    returns: tuple[ReturnDoc, ...] = ()
    body: Range | None = None
    description: str = ""

    def to_doc(self) -> FunctionDoc:
        return FunctionDoc(name=self.name, description=self.description, params=self.params, returns=self.returns)


@dataclass(frozen=True, slots=True)
class VariableSymbol:
    name: str
    position: Position
    description: str = ""


@dataclass(slots=True)
class DocumentSymbols:
    functions: list[FunctionSymbol] = field(default_factory=list)
    variables: list[VariableSymbol] = field(default_factory=list)
    datadefs: list[Datadef] = field(default_factory=list)
    scopes: list[BodyScope] = field(default_factory=list)
    params_lists: list[ParamsListSpan] = field(default_factory=list)

    def user_names(self) -> set[str]:
        names = {fn.name for fn in self.functions}
        names.update(var.name for var in self.variables)
        return names

    def datadef_names(self) -> set[str]:
        names: set[str] = set()
        for datadef in self.datadefs:
            names.update(datadef_function_names(datadef))
        return names

    def datadef_types_before(self, position: Position) -> set[str]:
        return {datadef.name for datadef in self.datadefs if datadef.position < position}

    def scopes_containing(self, position: Position) -> list[BodyScope]:
        return [scope for scope in self.scopes if scope.body.contains(position)]

    def in_params_list(self, index: int) -> bool:
        return any(span.contains_index(index) for span in self.params_lists)


def read_params_list(tokens: Sequence[Token], index: int) -> ParamsListSpan | None:
    """Span of the parameter list opened at ``index``; None if it is not closed before another bracket."""
    if index < 0 or index >= len(tokens) or tokens[index].kind != TokenKind.PARAM_LIST_START:
        return None
    arrow = -1
    for idx in range(index + 1, len(tokens)):
        kind = tokens[idx].kind
        if kind == TokenKind.PARAM_LIST_END:
            return ParamsListSpan(first=index, last=idx, arrow=arrow)
        if kind in OPENING_BRACKETS or kind in CLOSING_BRACKETS:
            return None
        if kind == TokenKind.RIGHT_ARROW and arrow < 0:
            arrow = idx
    return None


def find_params_lists(tokens: Sequence[Token]) -> list[ParamsListSpan]:
    spans: list[ParamsListSpan] = []
    idx = 0
    while idx < len(tokens):
        span = read_params_list(tokens, idx)
        if span is not None:
            spans.append(span)
            idx = span.last + 1
            continue
        idx += 1
    return spans


def matching_close(tokens: Sequence[Token], index: int) -> int | None:
    """Index of the bracket closing the one at ``index`` (same bracket kind only)."""
    if index < 0 or index >= len(tokens):
        return None
    opener = tokens[index].kind
    closer = OPENING_BRACKETS.get(opener)
    if closer is None:
        return None
    depth = 0
    for idx in range(index, len(tokens)):
        kind = tokens[idx].kind
        if kind == opener:
            depth += 1
        elif kind == closer:
            depth -= 1
            if depth == 0:
                return idx
    return None


def params_from_span(tokens: Sequence[Token], span: ParamsListSpan) -> tuple[tuple[ParamDoc, ...], tuple[ReturnDoc, ...]]:
    params: list[ParamDoc] = []
    for idx in range(span.first + 1, span.params_end):
        token = tokens[idx]
        if token.kind == TokenKind.REFERENCE:
            params.append(ParamDoc(name=token.text))
        elif token.kind == TokenKind.SYMBOL and params and tokens[idx - 1].kind == TokenKind.REFERENCE:
            params[-1] = ParamDoc(name=params[-1].name, type=token.text)
    returns: list[ReturnDoc] = []
    if span.arrow >= 0:
        for idx in range(span.arrow + 1, span.last):
            token = tokens[idx]
            if token.kind == TokenKind.SYMBOL:
                returns.append(ReturnDoc(type=token.text))
    return tuple(params), tuple(returns)


def _is_declaration_symbol(token: Token) -> bool:
    return token.kind == TokenKind.SYMBOL and token.text.endswith(":") and len(token.text) > 1


def _is_reference(token: Token | None, text: str) -> bool:
    return token is not None and token.kind == TokenKind.REFERENCE and token.text == text


def _token_or_none(tokens: Sequence[Token], index: int) -> Token | None:
    if 0 <= index < len(tokens):
        return tokens[index]
    return None


def _description(docs: Mapping[int, DocComment], index: int) -> str:
    doc = docs.get(index)
    return doc.description if doc is not None else ""


def collect_symbols(tokens: Sequence[Token], docs: Mapping[int, DocComment] | None = None) -> DocumentSymbols:
    """Declarations in ``tokens``; ``docs`` maps a declaration token index to its doc comment."""
    docs = docs or {}
    symbols = DocumentSymbols(params_lists=find_params_lists(tokens))
    span_by_last = {span.last: span for span in symbols.params_lists}
    span_by_first = {span.first: span for span in symbols.params_lists}
    declared: set[int] = set()

    for idx, token in enumerate(tokens):
        if _is_declaration_symbol(token) and token.text[0].isupper():
            _collect_datadef(tokens, idx, span_by_first, symbols, declared)

    for idx, token in enumerate(tokens):
        if token.kind != TokenKind.EXEARR_START:
            continue
        close = matching_close(tokens, idx)
        if close is None:
            continue
        follower = _token_or_none(tokens, close + 1)
        if not (_is_reference(follower, "fun") or _is_reference(follower, "lam")):
            continue
        kind = follower.text if follower is not None else "lam"
        span = span_by_last.get(idx - 1)
        params: tuple[ParamDoc, ...] = ()
        returns: tuple[ReturnDoc, ...] = ()
        if span is not None:
            params, returns = params_from_span(tokens, span)
        body = Range(tokens[idx].start, tokens[close].end)
        symbols.scopes.append(BodyScope(body=body, params=frozenset(p.name for p in params), kind=kind))

        if kind != "fun":
            continue
        name_idx = (span.first if span is not None else idx) - 1
        name_token = _token_or_none(tokens, name_idx)
        if name_token is not None and _is_declaration_symbol(name_token):
            declared.add(name_idx)
            doc = docs.get(name_idx)
            symbols.functions.append(
                FunctionSymbol(
                    name=symbol_name(name_token),
                    position=name_token.start,
                    params=document_params(params, doc),
                    returns=document_returns(returns, doc),
                    body=body,
                    description=doc.description if doc is not None else "",
                )
            )

    for idx, token in enumerate(tokens):
        if token.kind == TokenKind.REFERENCE:
            follower = _token_or_none(tokens, idx + 1)
            if follower is not None and follower.kind == TokenKind.DEFINITION:
                symbols.variables.append(VariableSymbol(token.text, token.start, _description(docs, idx)))
        elif _is_declaration_symbol(token) and idx not in declared:
            symbols.variables.append(VariableSymbol(symbol_name(token), token.start, _description(docs, idx)))

    return symbols


def _collect_datadef(
    tokens: Sequence[Token],
    idx: int,
    span_by_first: dict[int, ParamsListSpan],
    symbols: DocumentSymbols,
    declared: set[int],
) -> None:
    name_token = tokens[idx]
    nxt = _token_or_none(tokens, idx + 1)
    if nxt is None:
        return

    if nxt.kind == TokenKind.PARAM_LIST_START:
        span = span_by_first.get(idx + 1)
        if span is None or not _is_reference(_token_or_none(tokens, span.last + 1), "datadef"):
            return
        params, _returns = params_from_span(tokens, span)
        symbols.datadefs.append(
            Datadef(name=":" + symbol_name(name_token), kind="struct", fields=params, position=name_token.start)
        )
        declared.add(idx)
        return

    if nxt.kind == TokenKind.ARR_START:
        close = matching_close(tokens, idx + 1)
        if close is None or not _is_reference(_token_or_none(tokens, close + 1), "datadef"):
            return
        symbols.datadefs.append(Datadef(name=":" + symbol_name(name_token), kind="union", position=name_token.start))
        declared.add(idx)
        for member_idx in range(idx + 2, close):
            member = tokens[member_idx]
            if not _is_declaration_symbol(member):
                continue
            span = span_by_first.get(member_idx + 1)
            if span is None:
                continue
            params, _returns = params_from_span(tokens, span)
            symbols.datadefs.append(
                Datadef(name=":" + symbol_name(member), kind="struct", fields=params, position=member.start)
            )
            declared.add(member_idx)
