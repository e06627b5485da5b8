"""
Pytest fixtures for Thronesim tests.
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.machine import advance
from ..engine_core.orders import ORDER_TOKENS
from ..engine_core.reducer import apply_action
from ..engine_core.state import ActionSubPhase, DecisionType, GameState, House, Phase, UnitType
from ..games.thrones import areas as A
from ..games.thrones.areas import BOARD
from ..games.thrones.setup import create_initial_state


def clear_board(state: GameState) -> None:
    """Remove every unit, order, token and garrison from the board."""
    for area_id, area in enumerate(state.areas):
        for unit in list(area.units):
            state.remove_unit(area_id, unit)
        area.order = None
        area.house = None
        area.garrison = None
        area.power_token = False


def put(state: GameState, area_id: int, house: House, *unit_types: UnitType) -> None:
    """Place units from the pool and give the house control of the area."""
    for unit_type in unit_types:
        state.add_unit(area_id, unit_type, house)
    state.areas[area_id].house = house
    port = BOARD.port_of(area_id)
    if port is not None:
        state.areas[port].house = house


def answer(state: GameState, action: Action):
    """Apply an action that must succeed, then advance."""
    result = apply_action(state, action)
    assert result.success, result.error
    return advance(state)


def total_units(state: GameState) -> int:
    return sum(len(area.units) for area in state.areas)


def attack(state, attacker, attacking, defender, defending, origin=A.HARRENHAL, target=A.STONEY_SEPT):
    """Set up both armies, march every attacking unit and return the next decision."""
    put(state, origin, attacker, *attacking)
    put(state, target, defender, *defending)
    state.areas[origin].order = ORDER_TOKENS[1].place(attacker, 1)
    pending = advance(state)
    assert pending.decision_type == DecisionType.CHOOSE_MARCH
    assert pending.area_id == origin
    return answer(state, Action.march(attacker, target, list(range(len(attacking)))))


@pytest.fixture
def three_player_state() -> GameState:
    """Fresh 3-player game (Stark, Lannister, Baratheon)."""
    return create_initial_state(3, 42)


@pytest.fixture
def six_player_state() -> GameState:
    """Fresh 6-player game."""
    return create_initial_state(6, 42)


@pytest.fixture
def empty_board_state() -> GameState:
    """
    3-player game with a bare board, positioned in the March sub-phase.

    The Valyrian Steel Blade is already used and every hand is empty, so
    combats run on unit strength alone unless a test sets cards up.
    """
    state = create_initial_state(3, 7)
    clear_board(state)
    state.phase = Phase.ACTION
    state.action_sub_phase = ActionSubPhase.MARCH
    state.orders_revealed = True
    state.blade_used = True
    for record in state.houses.values():
        record.hand = []
        record.discards = []
        record.supply = 6
    return state


@pytest.fixture
def planning_state(three_player_state: GameState) -> GameState:
    """3-player game advanced to its first decision (Baratheon orders)."""
    pending = advance(three_player_state)
    assert pending.decision_type == DecisionType.PLACE_ORDERS
    return three_player_state
