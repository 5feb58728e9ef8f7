"""Publishes analysis problems and breakpoints as editor marker dictionaries."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from PySide6.QtCore import QObject, Signal

from postfix_ide.core.positions import point_range, range_to_editor
from postfix_ide.services.source_analysis import Diagnostic, Severity
from postfix_ide.ui.controllers.breakpoint_tracker import Breakpoint

logger = logging.getLogger(__name__)

MARKER_SOURCE = "postfix"


def diagnostic_to_marker(diagnostic: Diagnostic) -> dict[str, Any]:
    marker: dict[str, Any] = range_to_editor(diagnostic.range)
    marker["severity"] = Severity(diagnostic.severity).value
    marker["message"] = str(diagnostic.message)
    marker["source"] = MARKER_SOURCE
    return marker


def breakpoint_to_marker(bp: Breakpoint) -> dict[str, Any]:
    marker: dict[str, Any] = range_to_editor(point_range(bp.position))
    marker["kind"] = bp.kind.value
    marker["expression"] = bp.expression
    marker["source"] = MARKER_SOURCE
    return marker


class DiagnosticsPublisher(QObject):
    markersChanged = Signal(object)  # list[dict]
    breakpointMarkersChanged = Signal(object)  # list[dict]
    problemCountChanged = Signal(int, int)  # errors, warnings

    def __init__(self, sink: Any = None, parent=None):
        super().__init__(parent)
        self._sink = sink
        self._markers: list[dict[str, Any]] = []
        self._breakpoint_markers: list[dict[str, Any]] = []

    # ---------- Public API ----------

    @property
    def markers(self) -> list[dict[str, Any]]:
        return [dict(item) for item in self._markers]

    @property
    def breakpoint_markers(self) -> list[dict[str, Any]]:
        return [dict(item) for item in self._breakpoint_markers]

    def set_sink(self, sink: Any) -> None:
        self._sink = sink
        self._forward("set_markers", self.markers)
        self._forward("set_breakpoint_markers", self.breakpoint_markers)

    def publish_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> None:
        diagnostics = list(diagnostics)
        self._markers = [diagnostic_to_marker(item) for item in diagnostics]
        errors = sum(1 for item in diagnostics if item.severity == Severity.ERROR)
        warnings = len(diagnostics) - errors
        self.markersChanged.emit(self.markers)
        self.problemCountChanged.emit(errors, warnings)
        self._forward("set_markers", self.markers)

    def publish_breakpoints(self, breakpoints: Sequence[Breakpoint]) -> None:
        self._breakpoint_markers = [breakpoint_to_marker(bp) for bp in breakpoints]
        self.breakpointMarkersChanged.emit(self.breakpoint_markers)
        self._forward("set_breakpoint_markers", self.breakpoint_markers)

    def clear(self) -> None:
        self.publish_diagnostics([])
        self.publish_breakpoints([])

    # ---------- Helpers ----------

    def _forward(self, method_name: str, markers: list[dict[str, Any]]) -> None:
        if self._sink is None:
            return
        method = getattr(self._sink, method_name, None)
        if not callable(method):
            return
        try:
            method(markers)
        except Exception:
            # A broken view must never break analysis.
            logger.exception("Marker sink %s failed", method_name)
