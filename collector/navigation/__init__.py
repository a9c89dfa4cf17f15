"""Navigation through a compiled procedure.

Decides which trial runs next from the current position and the optional
command a trial embeds in its responses.
"""

from __future__ import annotations

from collector.navigation.commands import (
    COMMAND_FIELD,
    MOD_PROC_INDEX,
    SHORTCUT_COMMANDS,
    NavigationResult,
    advance,
    clamp_position,
    parse_mod_proc_index,
    resolve_next_position,
)
from collector.navigation.state import NavigationState

__all__ = [
    "COMMAND_FIELD",
    "MOD_PROC_INDEX",
    "SHORTCUT_COMMANDS",
    "NavigationResult",
    "NavigationState",
    "advance",
    "clamp_position",
    "parse_mod_proc_index",
    "resolve_next_position",
]
