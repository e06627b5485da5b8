"""
Rules configuration.

Values default to the printed rules. Each can be overridden through a
THRONESIM_* environment variable when a game is created by the runner or
the CLI; the engine itself only ever reads the config stored on the state.
"""

from __future__ import annotations
import os
from typing import Literal

from pydantic import BaseModel, Field


class RulesConfig(BaseModel):
    """Tunable rule constants carried inside every GameState."""

    round_limit: int = Field(default=10, ge=1, description="Last round played before the tiebreak")
    castles_to_win: int = Field(default=7, ge=1, description="Castles/strongholds needed for an outright win")
    max_power: int = Field(default=20, ge=0, description="Cap on a house's available power tokens")
    max_advance_steps: int = Field(default=10_000, ge=1, description="Hard step budget for one advance() call")
    tiebreak: Literal["uniform", "weighted"] = Field(
        default="uniform",
        description="uniform: one point per castle/stronghold; weighted: stronghold 2, castle 1",
    )
    starting_threat: int = Field(default=2, ge=0, le=12)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> RulesConfig:
        """Build a config from THRONESIM_* environment variables."""
        overrides: dict[str, object] = {}
        for name in cls.model_fields:
            value = os.getenv(f"THRONESIM_{name.upper()}")
            if value is not None:
                overrides[name] = value
        return cls.model_validate(overrides)

