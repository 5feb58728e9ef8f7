"""Anchored ranges that follow edits of a text document."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Protocol

from PySide6.QtGui import QTextCursor, QTextDocument

from postfix_ide.core.positions import Range, document_offset, position_at_offset


class AnchorStore(Protocol):
    def create(self, rng: Range) -> int: ...

    def resolve(self, anchor_id: int) -> Range | None: ...

    def remove(self, anchor_id: int) -> None: ...


@dataclass
class _Anchor:
    cursor: QTextCursor
    empty: bool


class DocumentAnchorStore:
    """``AnchorStore`` over a ``QTextDocument``.

    Each anchor is a ``QTextCursor`` selection; the document moves it on every
    edit. An anchor that covered text and collapsed to nothing (its text was
    deleted) no longer resolves.
    """

    def __init__(self, document: QTextDocument):
        self._document = document
        self._anchors: dict[int, _Anchor] = {}
        self._ids = itertools.count(1)

    @property
    def document(self) -> QTextDocument:
        return self._document

    def create(self, rng: Range) -> int:
        start = document_offset(self._document, rng.start)
        end = max(start, document_offset(self._document, rng.end))
        cursor = QTextCursor(self._document)
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.KeepAnchor)
        anchor_id = next(self._ids)
        self._anchors[anchor_id] = _Anchor(cursor=cursor, empty=start == end)
        return anchor_id

    def resolve(self, anchor_id: int) -> Range | None:
        anchor = self._anchors.get(anchor_id)
        if anchor is None or anchor.cursor.isNull():
            return None
        start = anchor.cursor.selectionStart()
        end = anchor.cursor.selectionEnd()
        if not anchor.empty and start == end:
            return None
        return Range(position_at_offset(self._document, start), position_at_offset(self._document, end))

    def remove(self, anchor_id: int) -> None:
        self._anchors.pop(anchor_id, None)

    def clear(self) -> None:
        self._anchors.clear()

    def __len__(self) -> int:
        return len(self._anchors)
