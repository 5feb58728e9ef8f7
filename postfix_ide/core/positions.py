"""Position/range dataclasses and conversions between source and editor coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtGui import QTextDocument

    from postfix_ide.core.tokens import Token


@dataclass(frozen=True, order=True, slots=True)
class Position:
    """Zero-based source position."""

    line: int
    col: int


@dataclass(frozen=True, slots=True)
class Range:
    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, position: Position) -> bool:
        return self.start <= position < self.end


def range_for_token(token: "Token") -> Range:
    return Range(
        Position(token.line, token.col),
        Position(token.end_line, token.end_col),
    )


def point_range(position: Position) -> Range:
    return Range(position, position)


# ---------- Editor (one-based) coordinates ----------

def position_to_editor(position: Position) -> tuple[int, int]:
    return int(position.line) + 1, int(position.col) + 1


def position_from_editor(line: int, column: int) -> Position:
    return Position(max(0, int(line) - 1), max(0, int(column) - 1))


def range_to_editor(rng: Range) -> dict[str, int]:
    line, column = position_to_editor(rng.start)
    end_line, end_column = position_to_editor(rng.end)
    return {
        "line": line,
        "column": column,
        "end_line": end_line,
        "end_column": end_column,
    }


# ---------- Document offsets ----------
# QTextDocument offsets count UTF-16 code units; source columns count code points.

def utf16_code_units(text: str) -> int:
    if not text:
        return 0
    return len(text.encode("utf-16-le")) // 2


def codepoint_index_from_utf16_units(text: str, utf16_units: int) -> int:
    remaining = max(0, int(utf16_units))
    idx = 0
    while idx < len(text):
        units = 1 if ord(text[idx]) <= 0xFFFF else 2
        if remaining < units:
            break
        remaining -= units
        idx += 1
    return idx


def document_offset(document: "QTextDocument", position: Position) -> int:
    """Absolute document offset of ``position``, clamped into the document."""
    block_count = document.blockCount()
    if block_count <= 0:
        return 0
    line = max(0, min(int(position.line), block_count - 1))
    block = document.findBlockByNumber(line)
    if not block.isValid():
        return 0
    text = block.text()
    if int(position.line) >= block_count:
        return int(block.position() + utf16_code_units(text))
    col = max(0, min(int(position.col), len(text)))
    return int(block.position() + utf16_code_units(text[:col]))


def position_at_offset(document: "QTextDocument", offset: int) -> Position:
    block = document.findBlock(max(0, int(offset)))
    if not block.isValid():
        block = document.lastBlock()
        return Position(block.blockNumber(), len(block.text()))
    units = int(offset) - int(block.position())
    return Position(block.blockNumber(), codepoint_index_from_utf16_units(block.text(), units))
