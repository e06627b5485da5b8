"""
Thronesim - Headless rules engine for A Game of Thrones: The Board Game.

A deterministic, seeded state machine for running simulated games against
pluggable agents. The engine provides:
- Game setup for 3 to 6 houses
- Pure progression to the next pending decision (advance)
- Validated application of agent answers (apply_action)
- Masked per-house views (player_view)
- Serializable state records
"""

from .games.thrones.setup import create_initial_state
from .engine_core.machine import advance
from .engine_core.reducer import apply_action
from .engine_core.visibility import player_view

__version__ = "0.1.0"

__all__ = [
    "create_initial_state",
    "advance",
    "apply_action",
    "player_view",
]
