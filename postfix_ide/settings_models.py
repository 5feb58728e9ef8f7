from __future__ import annotations

from copy import deepcopy
from typing import TypedDict


class AnalysisSettings(TypedDict, total=False):
    enabled: bool
    recursion_name: str
    warn_unresolved_references: bool
    max_problems: int


class ExecutionSettings(TypedDict, total=False):
    steps_per_tick: int
    lock_editor_while_running: bool


class HighlightSettings(TypedDict, total=False):
    pause_token_color: str
    pause_line_color: str
    error_token_color: str
    error_line_color: str
    line_alpha: int


class IdeSettings(TypedDict, total=False):
    analysis: AnalysisSettings
    execution: ExecutionSettings
    highlight: HighlightSettings


def default_ide_settings() -> IdeSettings:
    defaults: IdeSettings = {
        "analysis": {
            "enabled": True,
            "recursion_name": "recur",
            "warn_unresolved_references": True,
            "max_problems": 500,
        },
        "execution": {
            "steps_per_tick": 1,
            "lock_editor_while_running": True,
        },
        "highlight": {
            "pause_token_color": "#f2c94c",
            "pause_line_color": "#f2c94c",
            "error_token_color": "#ff0018",
            "error_line_color": "#ff0018",
            "line_alpha": 48,
        },
    }
    return deepcopy(defaults)
