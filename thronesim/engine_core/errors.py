"""
Engine errors.

Two families:
- Contract violations (bad player count, bad seed, illegal action). The
  caller can fix its input and retry.
- Invariant violations. These signal an engine defect and are never caught
  inside the core.
"""


class ThronesimError(Exception):
    """Base class for all engine errors."""


class InvalidPlayerCount(ThronesimError, ValueError):
    """Raised by setup when the player count is outside 3..6."""

    def __init__(self, player_count):
        super().__init__(f"Player count must be between 3 and 6, got {player_count!r}")
        self.player_count = player_count


class InvalidSeed(ThronesimError, ValueError):
    """Raised by setup when the seed is not a non-negative 64-bit integer."""

    def __init__(self, seed):
        super().__init__(f"Seed must be an integer in [0, 2**64), got {seed!r}")
        self.seed = seed


class IllegalAction(ThronesimError):
    """
    An action that does not match the pending decision or breaks a rule.

    The reducer converts this into a failed ActionResult; the state is
    left untouched.
    """

    def __init__(self, message: str, error_code: str = "ILLEGAL_ACTION"):
        super().__init__(message)
        self.error_code = error_code


class EngineInvariantError(ThronesimError, RuntimeError):
    """Fatal engine defect: no-progress loop, broken table index, bad state."""
