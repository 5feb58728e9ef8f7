"""Controller for run/pause/step/stop orchestration of the stepping evaluator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from postfix_ide.core.tokens import TokenStream
from postfix_ide.services.evaluator import Evaluator, ExecutionPosition, RunCancelled, StepResult
from postfix_ide.ui.controllers.breakpoint_tracker import Breakpoint

logger = logging.getLogger(__name__)


class ExecutionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class RunOutcome:
    status: RunStatus
    value: Any = None
    error: BaseException | None = None
    position: ExecutionPosition | None = None

    @property
    def cancelled(self) -> bool:
        return self.status == RunStatus.CANCELLED


class ExecutionController(QObject):
    stateChanged = Signal(object)  # ExecutionState
    executionPositionChanged = Signal(object)  # ExecutionPosition | None (None clears the highlight)
    runFinished = Signal(object)  # RunOutcome
    statusMessage = Signal(str)

    DEFAULTS = {
        "steps_per_tick": 1,
    }

    def __init__(
        self,
        evaluator: Evaluator,
        source_provider: Callable[[], str],
        breakpoints_provider: Callable[[], Sequence[Breakpoint]] | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self._evaluator = evaluator
        self._source_provider = source_provider
        self._breakpoints_provider = breakpoints_provider
        self._state = ExecutionState.IDLE
        self._last_position: ExecutionPosition | None = None
        self._run_generation = 0
        self._cfg: dict = dict(self.DEFAULTS)

        self._step_timer = QTimer(self)
        self._step_timer.setSingleShot(True)
        self._step_timer.setInterval(0)
        self._step_timer.timeout.connect(self._on_step_timer)

    # ---------- Public API ----------

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def last_position(self) -> ExecutionPosition | None:
        return self._last_position

    @property
    def is_active(self) -> bool:
        return self._state in (ExecutionState.RUNNING, ExecutionState.PAUSED)

    @property
    def has_pending_step(self) -> bool:
        return self._step_timer.isActive()

    def update_settings(self, execution_cfg: dict | None) -> None:
        merged = dict(self.DEFAULTS)
        if isinstance(execution_cfg, dict):
            merged.update({key: value for key, value in execution_cfg.items() if key in self.DEFAULTS})
        try:
            merged["steps_per_tick"] = max(1, int(merged.get("steps_per_tick") or 1))
        except (TypeError, ValueError):
            merged["steps_per_tick"] = 1
        self._cfg = merged

    def run(self) -> None:
        if self._state == ExecutionState.RUNNING:
            return
        if self._state == ExecutionState.PAUSED:
            self.executionPositionChanged.emit(None)
            self._set_state(ExecutionState.RUNNING)
            self._schedule_step()
            return
        if not self._start_run():
            return
        self._set_state(ExecutionState.RUNNING)
        self._schedule_step()

    def pause(self) -> None:
        if self._state != ExecutionState.RUNNING:
            return
        self._step_timer.stop()
        self._set_state(ExecutionState.PAUSED)
        self.executionPositionChanged.emit(self._last_position)

    def step(self) -> None:
        if self._state == ExecutionState.RUNNING:
            return
        if self._state == ExecutionState.IDLE:
            if not self._start_run():
                return
            self._set_state(ExecutionState.PAUSED)
        generation = self._run_generation
        result = self._take_step(generation)
        if result is not None and generation == self._run_generation:
            self.executionPositionChanged.emit(self._last_position)

    def stop(self) -> None:
        if not self.is_active:
            return
        self._step_timer.stop()
        self._run_generation += 1
        try:
            self._evaluator.cancel()
        except Exception:
            logger.exception("Evaluator failed to cancel the run")
        self._last_position = None
        self._set_state(ExecutionState.STOPPED)
        self.executionPositionChanged.emit(None)
        self._set_state(ExecutionState.IDLE)
        self.statusMessage.emit("Execution stopped.")
        self.runFinished.emit(RunOutcome(status=RunStatus.CANCELLED))

    # ---------- Stepping ----------

    def _start_run(self) -> bool:
        self._run_generation += 1
        self._last_position = None
        try:
            tokens = TokenStream(self._source_provider()).list()
            breakpoints = list(self._breakpoints_provider() if self._breakpoints_provider is not None else [])
            for bp in breakpoints:
                bp.hits = 0
            self._evaluator.reset()
            self._evaluator.set_breakpoints(breakpoints)
            self._evaluator.start_run(tokens)
        except Exception as exc:
            logger.debug("Evaluator failed to start a run", exc_info=True)
            self._finish(RunStatus.FAILED, error=exc)
            return False
        return True

    def _schedule_step(self) -> None:
        if not self._step_timer.isActive():
            self._step_timer.start()

    def _on_step_timer(self) -> None:
        if self._state != ExecutionState.RUNNING:
            return
        generation = self._run_generation
        for _ in range(int(self._cfg["steps_per_tick"])):
            result = self._take_step(generation)
            if result is None or generation != self._run_generation or self._state != ExecutionState.RUNNING:
                return
            if result.pause:
                self._set_state(ExecutionState.PAUSED)
                self.executionPositionChanged.emit(self._last_position)
                return
        self._schedule_step()

    def _take_step(self, generation: int) -> StepResult | None:
        """Run one evaluator step; returns None once the run is over or was superseded."""
        try:
            result = self._evaluator.step()
        except RunCancelled:
            if generation == self._run_generation:
                self._finish(RunStatus.CANCELLED)
            return None
        except Exception as exc:
            if generation == self._run_generation:
                logger.debug("Evaluator step failed", exc_info=True)
                self._finish(RunStatus.FAILED, error=exc)
            return None

        if generation != self._run_generation:
            # stopped while the step was in progress
            return None
        if result.done:
            self._finish(RunStatus.COMPLETED, value=result.value)
            return None
        if isinstance(result.value, ExecutionPosition):
            self._last_position = result.value
        if self._state == ExecutionState.RUNNING:
            self.executionPositionChanged.emit(self._last_position)
        return result

    def _finish(self, status: RunStatus, *, value: Any = None, error: BaseException | None = None) -> None:
        self._step_timer.stop()
        self._run_generation += 1
        position = self._last_position
        self._last_position = None
        self.executionPositionChanged.emit(None)
        self._set_state(ExecutionState.IDLE)
        if status == RunStatus.FAILED:
            self.statusMessage.emit(f"Error: {error}")
        elif status == RunStatus.CANCELLED:
            self.statusMessage.emit("Execution stopped.")
        self.runFinished.emit(RunOutcome(status=status, value=value, error=error, position=position))

    def _set_state(self, state: ExecutionState) -> None:
        if state == self._state:
            return
        logger.debug("Execution state %s -> %s", self._state.value, state.value)
        self._state = state
        self.stateChanged.emit(state)
