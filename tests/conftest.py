"""
Pytest configuration and fixtures for the PostFix IDE tests.
"""
import os
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from postfix_ide.services.evaluator import ExecutionPosition, RunCancelled, StepResult  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def wait_until(app, predicate, timeout=2.0):
    """Pump the Qt event loop until ``predicate()`` holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if predicate():
            return True
        time.sleep(0.001)
    app.processEvents()
    return bool(predicate())


def pump(app, duration=0.05):
    deadline = time.monotonic() + duration
    while time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.001)


class ScriptedEvaluator:
    """Evaluator stand-in that visits every token once, in source order."""

    def __init__(self, result="done", fail_at=None, cancel_at=None):
        self.result = result
        self.fail_at = fail_at
        self.cancel_at = cancel_at
        self.calls = []
        self.breakpoints = []
        self.script = []
        self.index = 0
        self.cancelled = False

    def reset(self):
        self.calls.append("reset")
        self.script = []
        self.index = 0
        self.cancelled = False

    def set_breakpoints(self, breakpoints):
        self.calls.append("set_breakpoints")
        self.breakpoints = list(breakpoints)

    def start_run(self, tokens):
        self.calls.append("start_run")
        self.script = [ExecutionPosition(tok.line, tok.col, tok.text) for tok in tokens]

    def step(self):
        if self.cancelled:
            raise RunCancelled()
        if self.cancel_at is not None and self.index == self.cancel_at:
            raise RunCancelled()
        if self.fail_at is not None and self.index == self.fail_at:
            raise RuntimeError("boom")
        if self.index >= len(self.script):
            return StepResult(done=True, value=self.result)
        position = self.script[self.index]
        self.index += 1
        pause = False
        for bp in self.breakpoints:
            if bp.position == position.position:
                bp.hits += 1
                pause = True
        return StepResult(done=False, value=position, pause=pause)

    def cancel(self):
        self.calls.append("cancel")
        self.cancelled = True


@pytest.fixture
def evaluator():
    return ScriptedEvaluator()
