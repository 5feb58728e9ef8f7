"""Qt-aware controllers driving one PostFix editor."""

from .breakpoint_tracker import Breakpoint, BreakpointKind, BreakpointTracker
from .diagnostics_controller import DiagnosticsPublisher
from .editor_session import EditorSession
from .execution_controller import ExecutionController, ExecutionState, RunOutcome, RunStatus

__all__ = [
    "Breakpoint",
    "BreakpointKind",
    "BreakpointTracker",
    "DiagnosticsPublisher",
    "EditorSession",
    "ExecutionController",
    "ExecutionState",
    "RunOutcome",
    "RunStatus",
]
