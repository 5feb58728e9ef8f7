"""Breakpoints anchored to token starts and reconciled after every edit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from PySide6.QtCore import QObject, Signal

from postfix_ide.core.positions import Position, point_range, range_for_token
from postfix_ide.core.tokens import Token, token_at
from postfix_ide.services.anchor_store import AnchorStore

logger = logging.getLogger(__name__)


class BreakpointKind(str, Enum):
    UNCONDITIONAL = "unconditional"
    EXPRESSION = "expression"
    HIT_COUNT = "hit"
    LOG = "log"


@dataclass(slots=True)
class Breakpoint:
    anchor_id: int
    position: Position
    kind: BreakpointKind = BreakpointKind.UNCONDITIONAL
    expression: str | None = None
    hits: int = 0  # counted by the evaluator for hit-count breakpoints


class BreakpointTracker(QObject):
    breakpointsChanged = Signal(object)  # list[Breakpoint]

    def __init__(self, anchors: AnchorStore, tokens: Sequence[Token] = (), parent=None):
        super().__init__(parent)
        self._anchors = anchors
        self._tokens: list[Token] = list(tokens)
        self._breakpoints: list[Breakpoint] = []

    # ---------- Public API ----------

    def breakpoints(self) -> list[Breakpoint]:
        return list(self._breakpoints)

    def breakpoint_at(self, position: Position) -> Breakpoint | None:
        target = self._snap(position)
        for bp in self._breakpoints:
            if bp.position == target:
                return bp
        return None

    def set_tokens(self, tokens: Sequence[Token]) -> None:
        self._tokens = list(tokens)

    def set_breakpoint(
        self,
        position: Position,
        kind: BreakpointKind = BreakpointKind.UNCONDITIONAL,
        expression: str | None = None,
    ) -> Breakpoint:
        token = token_at(self._tokens, position)
        target = token.start if token is not None else position
        expr = expression if kind != BreakpointKind.UNCONDITIONAL else None

        for idx, existing in enumerate(self._breakpoints):
            if existing.position == target:
                updated = replace(existing, kind=BreakpointKind(kind), expression=expr, hits=0)
                self._breakpoints[idx] = updated
                self._publish()
                return updated

        rng = range_for_token(token) if token is not None else point_range(target)
        anchor_id = self._anchors.create(rng)
        bp = Breakpoint(anchor_id=anchor_id, position=target, kind=BreakpointKind(kind), expression=expr)
        self._breakpoints.append(bp)
        self._publish()
        return bp

    def unset_breakpoint(self, position: Position) -> bool:
        target = self._snap(position)
        for idx, bp in enumerate(self._breakpoints):
            if bp.position == target:
                self._anchors.remove(bp.anchor_id)
                del self._breakpoints[idx]
                self._publish()
                return True
        return False

    def toggle_breakpoint(self, position: Position) -> bool:
        """Toggle an unconditional breakpoint; returns True if one is set afterwards."""
        if self.unset_breakpoint(position):
            return False
        self.set_breakpoint(position)
        return True

    def clear(self) -> None:
        if not self._breakpoints:
            return
        for bp in self._breakpoints:
            self._anchors.remove(bp.anchor_id)
        self._breakpoints = []
        self._publish()

    def reset_hit_counts(self) -> None:
        for bp in self._breakpoints:
            bp.hits = 0

    def reconcile(self, tokens: Sequence[Token]) -> bool:
        """Follow anchors into ``tokens`` (re-lexed after the edit); returns True if anything changed."""
        self._tokens = list(tokens)
        changed = False
        kept: list[Breakpoint] = []

        for bp in self._breakpoints:
            rng = self._anchors.resolve(bp.anchor_id)
            token = token_at(self._tokens, rng.start) if rng is not None else None
            if rng is None or token is None:
                logger.debug("Dropping breakpoint at %s: anchor decayed", bp.position)
                self._anchors.remove(bp.anchor_id)
                changed = True
                continue

            if any(other.position == token.start for other in kept):
                # two anchors collapsed onto the same token
                logger.debug("Dropping breakpoint at %s: merged into %s", bp.position, token.start)
                self._anchors.remove(bp.anchor_id)
                changed = True
                continue

            token_range = range_for_token(token)
            if token.start == bp.position and rng == token_range:
                kept.append(bp)
                continue

            self._anchors.remove(bp.anchor_id)
            anchor_id = self._anchors.create(token_range)
            kept.append(replace(bp, anchor_id=anchor_id, position=token.start))
            changed = True

        self._breakpoints = kept
        if changed:
            self._publish()
        return changed

    # ---------- Helpers ----------

    def _snap(self, position: Position) -> Position:
        token = token_at(self._tokens, position)
        return token.start if token is not None else position

    def _publish(self) -> None:
        self.breakpointsChanged.emit(self.breakpoints())
