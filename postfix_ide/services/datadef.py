"""Names and documentation of the functions a ``datadef`` declaration generates."""

from __future__ import annotations

from dataclasses import dataclass

from postfix_ide.core.positions import Position
from postfix_ide.services.builtin_catalog import FunctionDoc, ParamDoc, ReturnDoc


@dataclass(frozen=True, slots=True)
class Datadef:
    name: str  # type symbol, e.g. ":Point"
    kind: str  # struct | union
    fields: tuple[ParamDoc, ...] = ()
    position: Position = Position(0, 0)

    @property
    def prefix(self) -> str:
        return datadef_prefix(self.name)


def datadef_prefix(type_name: str) -> str:
    return str(type_name or "").lower().lstrip(":")


def datadef_function_names(datadef: Datadef) -> list[str]:
    prefix = datadef.prefix
    if datadef.kind == "union":
        return [f"{prefix}?"]
    return [
        prefix,
        f"{prefix}?",
        *(f"{prefix}-{field.name}" for field in datadef.fields),
        *(f"{prefix}-{field.name}-set" for field in datadef.fields),
        *(f"{prefix}-{field.name}-do" for field in datadef.fields),
    ]


def datadef_functions(datadef: Datadef) -> list[FunctionDoc]:
    prefix = datadef.prefix
    name = datadef.name
    predicate = FunctionDoc(
        name=f"{prefix}?",
        description=f"Check if the given object is an instance of {name}.",
        params=(ParamDoc("obj", ":Obj", "Object"),),
        returns=(ReturnDoc(":Bool", f"True if the object is an instance of {name}, false otherwise"),),
    )
    if datadef.kind == "union":
        return [predicate]

    instance = ParamDoc(prefix, name, f"{name} instance")
    docs = [
        FunctionDoc(
            name=prefix,
            description=f"Create an instance of {name}.",
            params=datadef.fields,
            returns=(ReturnDoc(name, f"New {name} instance"),),
        ),
        predicate,
    ]
    docs.extend(
        FunctionDoc(
            name=f"{prefix}-{field.name}",
            description=f"Get the `{field.name}` field of the given {name} instance.",
            params=(instance,),
            returns=(ReturnDoc(field.type, field.description or f"Value of the `{field.name}` field"),),
        )
        for field in datadef.fields
    )
    docs.extend(
        FunctionDoc(
            name=f"{prefix}-{field.name}-set",
            description=f"Set the `{field.name}` field of the given {name} instance.",
            params=(
                instance,
                ParamDoc(field.name, field.type, field.description or f"New value of the `{field.name}` field"),
            ),
            returns=(ReturnDoc(name, f"Updated {name} instance"),),
        )
        for field in datadef.fields
    )
    docs.extend(
        FunctionDoc(
            name=f"{prefix}-{field.name}-do",
            description=f"Update the `{field.name}` field of the given {name} instance.",
            params=(
                instance,
                ParamDoc(
                    "updater",
                    ":ExeArr",
                    f"Update function that will be called with the current `{field.name}` value "
                    f"({field.type}) and must return a new value",
                ),
            ),
            returns=(ReturnDoc(name, f"Updated {name} instance"),),
        )
        for field in datadef.fields
    )
    return docs
