from conftest import ScriptedEvaluator, wait_until

from PySide6.QtGui import QTextCursor, QTextDocument

from postfix_ide.core.positions import Position
from postfix_ide.settings_store import SettingsStore
from postfix_ide.ui.controllers import EditorSession, ExecutionState

LOOP_PROGRAM = "1 i! { i println i 1 + i! } loop"


class Sink:
    def __init__(self):
        self.markers = []
        self.breakpoint_markers = []

    def set_markers(self, markers):
        self.markers = markers

    def set_breakpoint_markers(self, markers):
        self.breakpoint_markers = markers


def make_session(text, evaluator=None, settings=None):
    doc = QTextDocument()
    doc.setPlainText(text)
    sink = Sink()
    session = EditorSession(evaluator or ScriptedEvaluator(), document=doc, settings=settings, sink=sink)
    return session, doc, sink


def insert_at(doc, offset, text):
    cursor = QTextCursor(doc)
    cursor.setPosition(offset)
    cursor.insertText(text)


def test_initial_analysis_is_published(qapp):
    session, _doc, sink = make_session("foo println")
    assert [d.message for d in session.diagnostics] == ["Unknown function or variable foo."]
    assert sink.markers[0]["column"] == 1


def test_edits_reanalyze_and_move_breakpoints(qapp):
    session, doc, sink = make_session(LOOP_PROGRAM)
    assert session.toggle_breakpoint_at_editor(1, 10) is True
    assert sink.breakpoint_markers[0]["column"] == 10

    insert_at(doc, 0, "  ")
    assert [bp.position for bp in session.breakpoints()] == [Position(0, 11)]
    assert sink.breakpoint_markers[0]["column"] == 12
    assert session.tokens[0].col == 2

    insert_at(doc, len(doc.toPlainText()), " undefined")
    assert [m["message"] for m in sink.markers] == ["Unknown function or variable undefined."]


def test_editor_is_locked_while_running(qapp):
    session, _doc, _sink = make_session(LOOP_PROGRAM)
    changes = []
    session.readOnlyChanged.connect(changes.append)

    session.run()
    assert session.is_read_only
    assert wait_until(qapp, lambda: session.state == ExecutionState.IDLE)
    assert changes == [True, False]


def test_lock_can_be_disabled(qapp):
    settings = SettingsStore({"execution": {"lock_editor_while_running": False}})
    session, _doc, _sink = make_session(LOOP_PROGRAM, settings=settings)
    changes = []
    session.readOnlyChanged.connect(changes.append)
    session.run()
    assert not session.is_read_only
    session.stop()
    assert changes == []


def test_pause_highlight_is_shown_and_cleared(qapp):
    session, _doc, _sink = make_session(LOOP_PROGRAM)
    selections = []
    session.executionSelectionsChanged.connect(selections.append)
    session.toggle_breakpoint(Position(0, 9))

    session.run()
    assert wait_until(qapp, lambda: session.state == ExecutionState.PAUSED)
    assert len(selections[-1]) == 2
    token_selection = selections[-1][1]
    assert token_selection.cursor.selectedText() == "println"
    assert session.is_read_only

    session.stop()
    assert selections[-1] == []
    assert not session.is_read_only


def test_failed_run_highlights_the_error_position(qapp):
    session, _doc, _sink = make_session(LOOP_PROGRAM, evaluator=ScriptedEvaluator(fail_at=2))
    selections = []
    messages = []
    session.executionSelectionsChanged.connect(selections.append)
    session.statusMessage.connect(messages.append)

    session.run()
    assert wait_until(qapp, lambda: messages)
    assert messages[-1] == "Error: boom"
    assert selections[-1][1].cursor.selectedText() == "i"


def test_language_features_through_session(qapp):
    session, _doc, _sink = make_session("sq: (x :Num -> :Num) { x x * } fun 3 sq")
    assert session.completions()[0].label == "sq"
    assert session.hover(Position(0, 38)) is not None


def test_editor_stays_locked_while_paused_and_stepping(qapp):
    session, _doc, _sink = make_session(LOOP_PROGRAM)
    changes = []
    session.readOnlyChanged.connect(changes.append)

    session.step()
    assert session.state == ExecutionState.PAUSED
    assert session.is_read_only
    session.step()
    session.run()
    assert session.is_read_only
    assert wait_until(qapp, lambda: session.state == ExecutionState.IDLE)
    assert changes == [True, False]


def test_pause_highlight_after_a_wide_character(qapp):
    session, _doc, _sink = make_session('"\U0001F600" println')
    selections = []
    session.executionSelectionsChanged.connect(selections.append)
    session.toggle_breakpoint(Position(0, 4))

    session.run()
    assert wait_until(qapp, lambda: session.state == ExecutionState.PAUSED)
    assert selections[-1][1].cursor.selectedText() == "println"
    session.stop()


def test_session_offers_snippets_at_the_cursor(qapp):
    session, _doc, _sink = make_session("#< >#\nsq: (x :Num -> :Num) { x x * } fun\n")
    labels = [item.label for item in session.completions(Position(0, 2))]
    assert labels[-1] == "Generate function documentation"
    assert [item.label for item in session.completions(Position(2, 0))][-1] == "Generate a function"
    assert all(item.kind != "snippet" for item in session.completions())
