import pytest

from postfix_ide.settings_models import default_ide_settings
from postfix_ide.settings_store import SettingsError, SettingsStore, deep_merge_defaults, dot_get, dot_set


def test_defaults_fill_missing_values_without_overwriting():
    store = SettingsStore({"execution": {"steps_per_tick": 50}})
    assert store.get("execution.steps_per_tick") == 50
    assert store.get("execution.lock_editor_while_running") is True
    assert store.get("analysis.recursion_name") == "recur"


def test_set_reports_changes():
    store = SettingsStore()
    assert store.set("highlight.line_alpha", 80) is True
    assert store.set("highlight.line_alpha", 80) is False
    assert store.section("highlight")["line_alpha"] == 80


def test_section_is_a_copy():
    store = SettingsStore()
    section = store.section("analysis")
    section["enabled"] = False
    assert store.get("analysis.enabled") is True
    assert store.section("missing") == {}


def test_restore_defaults():
    store = SettingsStore()
    store.set("analysis.max_problems", 3)
    store.restore_defaults()
    assert store.snapshot() == default_ide_settings()


@pytest.mark.parametrize("key", ["", "a..b", ".a"])
def test_malformed_keys_raise(key):
    with pytest.raises(SettingsError):
        dot_set({}, key, 1)


def test_dot_helpers():
    data = {}
    dot_set(data, "a.b.c", 1)
    assert data == {"a": {"b": {"c": 1}}}
    assert dot_get(data, "a.b.c") == 1
    assert dot_get(data, "a.x", "fallback") == "fallback"
    assert deep_merge_defaults({"a": {"b": 2}}, {"a": {"b": 1, "c": 3}}) == {"a": {"b": 2, "c": 3}}
