"""
Session Module - Runs single games against agents.

A session is one play-through:
- Created from (player_count, seed, config)
- Alternates advance / player_view / decide / apply_action
- Ends when a house wins or the decision budget runs out

Sessions are EPHEMERAL: nothing is persisted. A finished GameResult keeps
the final state, which engine_core.record can serialize.
"""

from .runner import GameRunner, GameResult, PlayerResult, run_game

__all__ = [
    "GameRunner",
    "GameResult",
    "PlayerResult",
    "run_game",
]
