"""Interface of the external stepping evaluator driven by the execution controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Sequence

from postfix_ide.core.positions import Position

if TYPE_CHECKING:
    from postfix_ide.core.tokens import Token
    from postfix_ide.ui.controllers.breakpoint_tracker import Breakpoint


@dataclass(frozen=True, slots=True)
class ExecutionPosition:
    line: int
    col: int
    token: str = ""

    @property
    def position(self) -> Position:
        return Position(self.line, self.col)


@dataclass(frozen=True, slots=True)
class StepResult:
    done: bool
    value: Any = None  # ExecutionPosition while running, the run's result once done
    pause: bool = False  # the evaluator asks to pause before executing ``value``


class RunCancelled(Exception):
    """Raised by an evaluator whose run was cancelled; not an evaluation error."""

    def __init__(self, message: str = "Interrupted"):
        super().__init__(message)


class Evaluator(Protocol):
    def reset(self) -> None: ...

    def set_breakpoints(self, breakpoints: Sequence["Breakpoint"]) -> None: ...

    def start_run(self, tokens: Sequence["Token"]) -> None: ...

    def step(self) -> StepResult: ...

    def cancel(self) -> None: ...
