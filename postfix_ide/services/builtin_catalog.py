"""Static catalog of PostFix built-in functions, variables and types."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "builtins.json"


@dataclass(frozen=True, slots=True)
class ParamDoc:
    name: str
    type: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class ReturnDoc:
    type: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class FunctionDoc:
    name: str
    description: str = ""
    params: tuple[ParamDoc, ...] = ()
    returns: tuple[ReturnDoc, ...] = ()


@dataclass(frozen=True, slots=True)
class VariableDoc:
    name: str
    description: str = ""


@dataclass
class BuiltinCatalog:
    functions: list[FunctionDoc] = field(default_factory=list)
    variables: list[VariableDoc] = field(default_factory=list)
    types: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self._function_names = {doc.name for doc in self.functions}
        self._variable_names = {doc.name for doc in self.variables}

    def is_function(self, name: str) -> bool:
        return name in self._function_names

    def is_variable(self, name: str) -> bool:
        return name in self._variable_names

    def is_builtin(self, name: str) -> bool:
        return name in self._function_names or name in self._variable_names

    def is_type(self, type_name: str) -> bool:
        return type_name in self.types

    def functions_named(self, name: str) -> list[FunctionDoc]:
        return [doc for doc in self.functions if doc.name == name]

    def variables_named(self, name: str) -> list[VariableDoc]:
        return [doc for doc in self.variables if doc.name == name]

    def register_functions(self, *docs: FunctionDoc) -> None:
        for doc in docs:
            self.functions.append(doc)
            self._function_names.add(doc.name)


def catalog_from_mapping(data: dict[str, Any]) -> BuiltinCatalog:
    functions = [_function_doc_from_mapping(item) for item in data.get("functions") or [] if isinstance(item, dict)]
    variables = [
        VariableDoc(name=str(item.get("name") or ""), description=str(item.get("description") or ""))
        for item in data.get("variables") or []
        if isinstance(item, dict) and item.get("name")
    ]
    types = {str(item) for item in data.get("types") or [] if str(item or "").startswith(":")}
    return BuiltinCatalog(
        functions=[doc for doc in functions if doc.name],
        variables=variables,
        types=types,
    )


def _function_doc_from_mapping(item: dict[str, Any]) -> FunctionDoc:
    params = tuple(
        ParamDoc(
            name=str(param.get("name") or ""),
            type=str(param.get("type") or ""),
            description=str(param.get("description") or ""),
        )
        for param in item.get("params") or []
        if isinstance(param, dict)
    )
    returns = tuple(
        ReturnDoc(type=str(ret.get("type") or ""), description=str(ret.get("description") or ""))
        for ret in item.get("returns") or []
        if isinstance(ret, dict)
    )
    return FunctionDoc(
        name=str(item.get("name") or ""),
        description=str(item.get("description") or ""),
        params=params,
        returns=returns,
    )


def load_builtin_catalog(path: str | Path | None = None) -> BuiltinCatalog:
    """Load a catalog from JSON; the bundled dataset is used when ``path`` is omitted."""
    source = Path(path) if path else DEFAULT_CATALOG_PATH
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Built-in catalog root in '{source}' must be a JSON object, found {type(raw).__name__}.")
    catalog = catalog_from_mapping(raw)
    logger.debug("Loaded %d built-in functions from %s", len(catalog.functions), source)
    return catalog


_default_catalog: BuiltinCatalog | None = None


def default_catalog() -> BuiltinCatalog:
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_builtin_catalog()
    return _default_catalog


def catalog_with(
    *,
    functions: Iterable[str] = (),
    variables: Iterable[str] = (),
    types: Iterable[str] = (),
) -> BuiltinCatalog:
    """Small catalog built from bare names."""
    return BuiltinCatalog(
        functions=[FunctionDoc(name=name) for name in functions],
        variables=[VariableDoc(name=name) for name in variables],
        types=set(types),
    )
