"""Documentation comments (``#< ... >#``) written right before a declaration.

The comment body starts with a free-text description. ``@param <name> <text>``
and ``@return <text>`` lines document the parameters and return values::

    #<
    Squares a number.
    @param x the number
    @return x times x
    >#
    sq: (x :Num -> :Num) { x x * } fun
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from postfix_ide.core.tokens import BlockComment, Token
from postfix_ide.services.builtin_catalog import ParamDoc, ReturnDoc

_PARAM_RE = re.compile(r"@param\s+(\S+)\s*(.*)")
_RETURN_RE = re.compile(r"@returns?\b\s*(.*)")


@dataclass(frozen=True, slots=True)
class DocComment:
    description: str = ""
    params: tuple[tuple[str, str], ...] = ()  # (name, description)
    returns: tuple[str, ...] = ()

    def param_description(self, name: str) -> str:
        for param_name, description in self.params:
            if param_name == name:
                return description
        return ""


def parse_doc_comment(text: str) -> DocComment:
    description: list[str] = []
    params: list[list[str]] = []
    returns: list[str] = []
    current: list[str] | None = None  # the tag that continuation lines extend

    for raw in str(text or "").splitlines():
        line = raw.strip()
        param = _PARAM_RE.match(line)
        if param:
            params.append([param.group(1), param.group(2).strip()])
            current = params[-1]
            continue
        ret = _RETURN_RE.match(line)
        if ret:
            returns.append(ret.group(1).strip())
            current = None
            continue
        if not line:
            if current is None and not returns:
                description.append("")
            continue
        if current is not None:
            current[1] = f"{current[1]} {line}".strip()
        elif returns:
            returns[-1] = f"{returns[-1]} {line}".strip()
        else:
            description.append(line)

    return DocComment(
        description="\n".join(description).strip(),
        params=tuple((name, desc) for name, desc in params),
        returns=tuple(returns),
    )


def attach_doc_comments(tokens: Sequence[Token], comments: Iterable[BlockComment]) -> dict[int, DocComment]:
    """Map the index of the first token after each comment to the parsed comment."""
    attached: dict[int, DocComment] = {}
    idx = 0
    for comment in comments:
        while idx < len(tokens) and tokens[idx].start < comment.end:
            idx += 1
        if idx >= len(tokens):
            break
        attached[idx] = parse_doc_comment(comment.text)
    return attached


def document_params(params: Sequence[ParamDoc], doc: DocComment | None) -> tuple[ParamDoc, ...]:
    if doc is None:
        return tuple(params)
    return tuple(replace(param, description=doc.param_description(param.name)) for param in params)


def document_returns(returns: Sequence[ReturnDoc], doc: DocComment | None) -> tuple[ReturnDoc, ...]:
    if doc is None:
        return tuple(returns)
    documented: list[ReturnDoc] = []
    for idx, ret in enumerate(returns):
        description = doc.returns[idx] if idx < len(doc.returns) else ""
        documented.append(replace(ret, description=description))
    return tuple(documented)
