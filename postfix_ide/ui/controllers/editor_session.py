"""One editor's document wired to analysis, breakpoints and execution."""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QTextDocument

from postfix_ide.core.positions import Position, position_from_editor
from postfix_ide.core.tokens import Token, tokenize
from postfix_ide.services.anchor_store import DocumentAnchorStore
from postfix_ide.services.builtin_catalog import BuiltinCatalog, default_catalog
from postfix_ide.services.evaluator import Evaluator, ExecutionPosition
from postfix_ide.services.language_features import CompletionItem, Hover, completion_items, hover_at
from postfix_ide.services.source_analysis import Diagnostic, analyze_tokens
from postfix_ide.settings_store import SettingsStore
from postfix_ide.ui.controllers.breakpoint_tracker import Breakpoint, BreakpointKind, BreakpointTracker
from postfix_ide.ui.controllers.diagnostics_controller import DiagnosticsPublisher
from postfix_ide.ui.controllers.execution_controller import (
    ExecutionController,
    ExecutionState,
    RunOutcome,
    RunStatus,
)
from postfix_ide.ui.execution_highlight import ExecutionHighlight

logger = logging.getLogger(__name__)


class EditorSession(QObject):
    readOnlyChanged = Signal(bool)
    executionSelectionsChanged = Signal(object)  # list[QTextEdit.ExtraSelection]
    statusMessage = Signal(str)

    def __init__(
        self,
        evaluator: Evaluator,
        *,
        document: QTextDocument | None = None,
        catalog: BuiltinCatalog | None = None,
        settings: SettingsStore | None = None,
        sink: Any = None,
        parent=None,
    ):
        super().__init__(parent)
        self._catalog = catalog if catalog is not None else default_catalog()
        self._settings = settings if settings is not None else SettingsStore()
        self._document = document if document is not None else QTextDocument(self)
        self._tokens: list[Token] = []
        self._diagnostics: list[Diagnostic] = []
        self._read_only = False

        self.anchors = DocumentAnchorStore(self._document)
        self.tracker = BreakpointTracker(self.anchors, parent=self)
        self.publisher = DiagnosticsPublisher(sink, parent=self)
        self.controller = ExecutionController(
            evaluator,
            self.source,
            self.tracker.breakpoints,
            parent=self,
        )
        self.highlight = ExecutionHighlight()
        self.apply_settings()

        self.tracker.breakpointsChanged.connect(self.publisher.publish_breakpoints)
        self.controller.stateChanged.connect(self._on_state_changed)
        self.controller.executionPositionChanged.connect(self._on_execution_position_changed)
        self.controller.runFinished.connect(self._on_run_finished)
        self.controller.statusMessage.connect(self.statusMessage.emit)
        self._document.contentsChanged.connect(self._on_contents_changed)
        self.tracker.set_tokens(self._tokens)

    # ---------- Public API ----------

    @property
    def document(self) -> QTextDocument:
        return self._document

    @property
    def tokens(self) -> list[Token]:
        return list(self._tokens)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)

    @property
    def state(self) -> ExecutionState:
        return self.controller.state

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    def source(self) -> str:
        return self._document.toPlainText()

    def apply_settings(self) -> None:
        self.controller.update_settings(self._settings.section("execution"))
        self.highlight.update_settings(self._settings.section("highlight"))
        self._refresh_analysis()
        self._update_read_only()

    def run(self) -> None:
        self.controller.run()

    def pause(self) -> None:
        self.controller.pause()

    def step(self) -> None:
        self.controller.step()

    def stop(self) -> None:
        self.controller.stop()

    def toggle_breakpoint(self, position: Position) -> bool:
        return self.tracker.toggle_breakpoint(position)

    def toggle_breakpoint_at_editor(self, line: int, column: int) -> bool:
        return self.tracker.toggle_breakpoint(position_from_editor(line, column))

    def set_breakpoint(
        self,
        position: Position,
        kind: BreakpointKind = BreakpointKind.UNCONDITIONAL,
        expression: str | None = None,
    ) -> Breakpoint:
        return self.tracker.set_breakpoint(position, kind, expression)

    def breakpoints(self) -> list[Breakpoint]:
        return self.tracker.breakpoints()

    def completions(self, position: Position | None = None) -> list[CompletionItem]:
        return completion_items(self.source(), self._catalog, position)

    def hover(self, position: Position) -> Hover | None:
        return hover_at(self.source(), position, self._catalog)

    # ---------- Document revisions ----------

    def _on_contents_changed(self) -> None:
        self._refresh_analysis()
        self.tracker.reconcile(self._tokens)

    def _refresh_analysis(self) -> None:
        self._tokens = list(tokenize(self.source()))
        self._diagnostics = analyze_tokens(
            self._tokens,
            self._catalog,
            settings=self._settings.section("analysis"),
        )
        self.publisher.publish_diagnostics(self._diagnostics)

    # ---------- Execution ----------

    def _on_state_changed(self, _state: ExecutionState) -> None:
        self._update_read_only()

    def _on_execution_position_changed(self, position: ExecutionPosition | None) -> None:
        if position is None:
            self.executionSelectionsChanged.emit([])
            return
        if self.controller.state != ExecutionState.PAUSED:
            return
        self.executionSelectionsChanged.emit(self.highlight.pause_selections(self._document, position))

    def _on_run_finished(self, outcome: RunOutcome) -> None:
        if outcome.status != RunStatus.FAILED or outcome.position is None:
            return
        self.executionSelectionsChanged.emit(self.highlight.error_selections(self._document, outcome.position))

    def _update_read_only(self) -> None:
        lock = bool(self._settings.get("execution.lock_editor_while_running", True))
        read_only = lock and self.controller.is_active
        if read_only == self._read_only:
            return
        self._read_only = read_only
        logger.debug("Editor read-only: %s", read_only)
        self.readOnlyChanged.emit(read_only)
