"""
Engine Core - Deterministic game state management and rule resolution.

The engine is the runtime that:
1. Holds the GameState
2. Advances it until a house must decide something (machine)
3. Applies that house's Action (reducer)
4. Resolves combat, bidding and Westeros cards step-by-step
5. Projects masked views for agents (visibility)

Only the data model is exported here; the machine, reducer and visibility
modules import the static board and card tables, which in turn import the
data model.
"""

from .state import (
    GameState,
    HouseState,
    AreaState,
    CombatState,
    BiddingState,
    PendingDecision,
    House,
    DecisionType,
    Phase,
    Track,
    UnitType,
)
from .action import Action, ActionPayload, ActionResult, MusterStep
from .errors import (
    ThronesimError,
    InvalidPlayerCount,
    InvalidSeed,
    IllegalAction,
    EngineInvariantError,
)

__all__ = [
    "GameState",
    "HouseState",
    "AreaState",
    "CombatState",
    "BiddingState",
    "PendingDecision",
    "House",
    "DecisionType",
    "Phase",
    "Track",
    "UnitType",
    "Action",
    "ActionPayload",
    "ActionResult",
    "MusterStep",
    "ThronesimError",
    "InvalidPlayerCount",
    "InvalidSeed",
    "IllegalAction",
    "EngineInvariantError",
]
