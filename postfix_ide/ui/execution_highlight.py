"""Extra selections marking the paused token and the position of a failed run."""

from __future__ import annotations

from PySide6.QtGui import QColor, QTextCursor, QTextDocument, QTextFormat
from PySide6.QtWidgets import QTextEdit

from postfix_ide.core.positions import Position, document_offset
from postfix_ide.services.evaluator import ExecutionPosition


class ExecutionHighlight:
    DEFAULTS = {
        "pause_token_color": "#f2c94c",
        "pause_line_color": "#f2c94c",
        "error_token_color": "#ff0018",
        "error_line_color": "#ff0018",
        "line_alpha": 48,
    }

    def __init__(self, highlight_cfg: dict | None = None):
        self._cfg: dict = dict(self.DEFAULTS)
        self.update_settings(highlight_cfg)

    def update_settings(self, highlight_cfg: dict | None) -> None:
        merged = dict(self.DEFAULTS)
        if isinstance(highlight_cfg, dict):
            merged.update({key: value for key, value in highlight_cfg.items() if key in self.DEFAULTS})
        for key in ("pause_token_color", "pause_line_color", "error_token_color", "error_line_color"):
            if not QColor(str(merged.get(key) or "")).isValid():
                merged[key] = self.DEFAULTS[key]
        try:
            merged["line_alpha"] = max(0, min(255, int(merged.get("line_alpha", 48))))
        except (TypeError, ValueError):
            merged["line_alpha"] = self.DEFAULTS["line_alpha"]
        self._cfg = merged

    # ---------- Public API ----------

    def pause_selections(
        self, document: QTextDocument, position: ExecutionPosition | None
    ) -> list[QTextEdit.ExtraSelection]:
        if position is None:
            return []
        return self._token_and_line(
            document,
            position.position,
            max(1, len(position.token or "")),
            token_color=self._cfg["pause_token_color"],
            line_color=self._cfg["pause_line_color"],
        )

    def error_selections(
        self, document: QTextDocument, position: ExecutionPosition | None
    ) -> list[QTextEdit.ExtraSelection]:
        if position is None:
            return []
        return self._token_and_line(
            document,
            position.position,
            max(1, len(position.token or "")),
            token_color=self._cfg["error_token_color"],
            line_color=self._cfg["error_line_color"],
        )

    # ---------- Helpers ----------

    def _token_and_line(
        self,
        document: QTextDocument,
        position: Position,
        length: int,
        *,
        token_color: str,
        line_color: str,
    ) -> list[QTextEdit.ExtraSelection]:
        block = document.findBlockByNumber(position.line)
        if not block.isValid():
            return []

        line_sel = QTextEdit.ExtraSelection()
        line_cursor = QTextCursor(block)
        line_cursor.clearSelection()
        line_sel.cursor = line_cursor
        line_sel.format.setProperty(QTextFormat.FullWidthSelection, True)
        background = QColor(line_color)
        background.setAlpha(int(self._cfg["line_alpha"]))
        line_sel.format.setBackground(background)

        start = document_offset(document, position)
        end = document_offset(document, Position(position.line, position.col + length))
        token_sel = QTextEdit.ExtraSelection()
        token_cursor = QTextCursor(document)
        token_cursor.setPosition(start)
        token_cursor.setPosition(max(start, end), QTextCursor.KeepAnchor)
        token_sel.cursor = token_cursor
        token_sel.format.setBackground(QColor(token_color))
        return [line_sel, token_sel]
